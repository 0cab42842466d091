class ClaimCheckError(Exception):
    """Base class for engine errors."""


class ExternalServiceError(ClaimCheckError):
    """Raised by an adapter when a remote dependency fails or answers garbage."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class AdjustmentRangeError(ClaimCheckError):
    """Raised in strict mode when an analyzer delta escapes its declared range."""


class PhrasingFallbackError(RuntimeError):
    """Raised when the phrasing service must be skipped in favour of the template."""
