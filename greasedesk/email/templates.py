from __future__ import annotations

from html import escape

VERIFICATION_SUBJECT = "Welcome to GreaseDesk! Please verify your email"


def invitation_subject(garage_name: str) -> str:
    return f"You've been invited to join {garage_name} on GreaseDesk"


def verification_email_html(user_name: str, verification_link: str) -> str:
    name = escape(user_name or "there")
    link = escape(verification_link, quote=True)
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <title>Verify Your Email</title>
  </head>
  <body style="font-family: Arial, sans-serif; background-color: #f6f9fc; padding: 20px;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 30px; border-radius: 8px; border: 1px solid #e6e6e6;">
      <h1 style="color: #1e3a8a; font-size: 24px; text-align: center;">Welcome to GreaseDesk!</h1>
      <p style="color: #333; font-size: 16px;">Hi {name},</p>
      <p style="color: #333; font-size: 16px;">
        Thanks for signing up. Verify your email address to start your free trial.
      </p>
      <div style="text-align: center; margin-top: 30px;">
        <a href="{link}" style="background-color: #3b82f6; border-radius: 6px; color: #fff; font-size: 16px; font-weight: bold; text-decoration: none; padding: 12px 20px; display: inline-block;">
          Verify Email Address
        </a>
      </div>
      <p style="color: #555; font-size: 14px; margin-top: 30px; text-align: center;">
        If the button doesn't work, copy and paste this link into your browser:
      </p>
      <p style="word-break: break-all; font-size: 12px; color: #1e40af; text-align: center;">{link}</p>
    </div>
  </body>
</html>
"""


def invitation_email_html(garage_name: str, invite_link: str) -> str:
    garage = escape(garage_name)
    link = escape(invite_link, quote=True)
    return f"""<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <h2>Join {garage} on GreaseDesk!</h2>
  <p>You've been invited to join the team at {garage}.</p>
  <p><a href="{link}" style="background-color: #4CAF50; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">Accept Invitation</a></p>
  <p>The GreaseDesk Team</p>
</div>
"""
