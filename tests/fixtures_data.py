"""Reusable payloads for backend test scenarios."""

LEWIS_REGISTRATION = {
    "name": "Lewis",
    "email": "Lewis@Example.com ",
    "password": "longenough1",
}
LEWIS_EMAIL = "lewis@example.com"

OTHER_REGISTRATION = {
    "name": "Priya",
    "email": "priya@example.org",
    "password": "anotherlongpass",
}

AUTOFIX_SETUP = {
    "groupName": "AutoFix",
    "siteName": "AutoFix Birmingham",
    "postcode": "B1 2AB",
}

FULL_SETUP = {
    "groupName": "Priya Motors",
    "siteName": "Priya Motors Leeds",
    "addressLine1": "1 Wellington Street",
    "city": "Leeds",
    "postcode": "ls1 4ap",
    "companyNumber": "12345678",
    "vatNumber": "GB123456789",
    "tradingName": "Priya Motors Ltd",
}

UK_RATES = {
    "defaultVatRate": "20.00",
    "defaultLabourRate": "75.00",
    "timezone": "Europe/London",
    "currencyCode": "GBP",
    "pricingDisplayMode": "ex_vat",
    "supportedCountries": ["United Kingdom"],
    "supportedCurrencies": ["GBP"],
}

MECHANIC_INVITE = {"invites": [{"email": "tech@example.com", "role": "MECHANIC"}]}
