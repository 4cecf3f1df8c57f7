"""Error taxonomy for fund backend communication."""

from enum import Enum


class FundAPIErrorType(str, Enum):
    """Classification of fund backend failures."""

    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    SERVER_ERROR = "server_error"  # 5xx
    CLIENT_ERROR = "client_error"  # 4xx
    PROTOCOL_VIOLATION = "protocol_violation"  # malformed JSON or envelope
    APPLICATION_ERROR = "application_error"  # success: false
    SAFETY_LIMIT_REACHED = "safety_limit_reached"  # non-fatal, warning only


# Failures worth another attempt; everything else fails fast
TRANSIENT_ERROR_TYPES = frozenset({
    FundAPIErrorType.TIMEOUT,
    FundAPIErrorType.NETWORK_UNREACHABLE,
    FundAPIErrorType.SERVER_ERROR,
})


class FundAPIError(Exception):
    """Raised when a fund backend request fails."""

    def __init__(
        self,
        error_type: FundAPIErrorType,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.status_code = status_code
        self.url = url

    @property
    def retryable(self) -> bool:
        return self.error_type in TRANSIENT_ERROR_TYPES

    def __str__(self) -> str:
        return f"[{self.error_type.value}] {self.message}"


class UnknownCategoryError(ValueError):
    """Raised when a category slug does not resolve to a canonical category."""

    def __init__(self, slug: str):
        super().__init__(f"Unknown fund category: {slug}")
        self.slug = slug
