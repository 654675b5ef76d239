"""Exception hierarchy for WebConvert."""


class WebConvertError(Exception):
    """Base class for all WebConvert errors."""


class ConfigurationError(WebConvertError):
    """Raised when configuration files or settings cannot be loaded."""


class RateFetchError(WebConvertError):
    """Raised when a fresh exchange-rate snapshot cannot be retrieved."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class EngineStateError(WebConvertError):
    """Raised when the mutation engine is driven outside its lifecycle."""


__all__ = ["WebConvertError", "ConfigurationError", "RateFetchError", "EngineStateError"]
