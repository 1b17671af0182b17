"""Frontend helpers package."""

from frontend.helpers.rules_client import (
    RulesClient,
    RulesClientError,
    GatewayError,
    PayloadError,
    get_rules_client,
    reset_rules_client,
)

__all__ = [
    "RulesClient",
    "RulesClientError",
    "GatewayError",
    "PayloadError",
    "get_rules_client",
    "reset_rules_client",
]
