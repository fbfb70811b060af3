"""Billing providers - abstracted external platform integrations."""

from packages.billing.providers.metering.factory import get_metering_provider

__all__ = [
    "get_metering_provider",
]
