import json

import httpx

from greasedesk.email.base import EmailMessage, EmailSendResult
from greasedesk.email.resend_provider import ResendEmailProvider
from greasedesk.email.service import EmailService


def _provider(handler, api_key="re_test"):
    return ResendEmailProvider(
        api_key,
        api_url="https://api.resend.test/emails",
        sender="GreaseDesk <noreply@greasedesk.test>",
        transport=httpx.MockTransport(handler),
    )


def test_resend_posts_message_with_bearer_key():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "msg_123"})

    result = _provider(handler).send(
        EmailMessage(to="lewis@example.com", subject="Hi", html="<p>Hi</p>", tags={"category": "verification"})
    )

    assert result.ok
    assert result.provider_message_id == "msg_123"
    assert captured["auth"] == "Bearer re_test"
    assert captured["body"]["to"] == ["lewis@example.com"]
    assert captured["body"]["tags"] == [{"name": "category", "value": "verification"}]


def test_resend_rejection_is_reported_not_raised():
    provider = _provider(lambda request: httpx.Response(422, json={"message": "invalid from"}))
    service = EmailService(provider)

    assert service.send_verification_email("lewis@example.com", "Lewis", "https://x.test/verify") is False


def test_transport_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    assert EmailService(_provider(handler)).send_email("a@example.com", "s", "<p/>") is False


def test_missing_api_key_fails_without_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert EmailService(_provider(handler, api_key="")).send_email("a@example.com", "s", "<p/>") is False


def test_invitation_html_escapes_garage_name():
    provider_outbox = []

    class Recorder:
        name = "recorder"

        def send(self, message):
            provider_outbox.append(message)
            return EmailSendResult(status="sent")

    assert EmailService(Recorder()).send_team_invitation_email("t@example.com", "<AutoFix>", "https://x.test/i")
    assert "&lt;AutoFix&gt;" in provider_outbox[0].html
