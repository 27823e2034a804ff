from __future__ import annotations

DEFAULT_PAYMENT_GATEWAY = "Direct"
PAYMENT_GATEWAY_MAX_LENGTH = 50

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

# Keyed by the position of the project in SAMPLE_PROJECTS.
SAMPLE_DONATIONS = [
    {"project_index": 0, "amount": "1000.00", "payment_gateway": "PayPal"},
    {"project_index": 0, "amount": "1500.00", "payment_gateway": "Stripe"},
    {"project_index": 1, "amount": "5000.00", "payment_gateway": "PayPal"},
    {"project_index": 1, "amount": "3750.00", "payment_gateway": "Bank Transfer"},
    {"project_index": 2, "amount": "5200.00", "payment_gateway": "Stripe"},
]

RATE_LIMIT_MESSAGE = "Too many donation requests from this IP, please try again later."
