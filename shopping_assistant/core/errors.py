"""
Exceptions raised by the shopping assistant engine.
"""


class ShoppingAssistantError(Exception):
    """Base class for all engine errors."""


class InputValidationError(ShoppingAssistantError, ValueError):
    """Malformed message, context or guideline. The turn is rejected."""


class UpstreamUnavailable(ShoppingAssistantError):
    """Catalog or store failure."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")


class ConfigurationError(ShoppingAssistantError, ValueError):
    """Invalid mapping configuration entry."""
