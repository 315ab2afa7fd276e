"""
Payment views package.

- intents.py: Payment-intent creation for orders
- webhooks.py: Provider webhook handlers
"""

from .intents import CreatePaymentIntentView
from .webhooks import StripeWebhookView

__all__ = [
    "CreatePaymentIntentView",
    "StripeWebhookView",
]
