from __future__ import annotations


TIMEOUT_ERROR_MESSAGE = "Summary generation timed out. Please try again."
INVALID_API_KEY_ERROR_MESSAGE = "ANTHROPIC_API_KEY not set or invalid"
CANCELLED_ERROR_MESSAGE = "Reduction cancelled before the summary was applied; transcript unchanged."
GENERIC_ERROR_MESSAGE = "Unable to reduce the transcript right now. Please try again."


class ReducerConfigurationError(ValueError):
    """Raised when a reducer cannot be built from its collaborators or settings."""


class ReductionCancelledError(RuntimeError):
    """Raised when cancellation is requested before the summary is spliced in."""


def describe_reduction_failure(exc: BaseException) -> str:
    if isinstance(exc, ReductionCancelledError):
        return CANCELLED_ERROR_MESSAGE
    if isinstance(exc, ReducerConfigurationError):
        message = str(exc).strip()
        return f"Invalid reducer configuration: {message}" if message else GENERIC_ERROR_MESSAGE

    message = str(exc).strip()
    lowered = message.lower()
    error_type = type(exc).__name__.lower()

    if (
        "anthropic_api_key" in lowered
        or "api key" in lowered
        or "authentication" in lowered
        or "unauthorized" in lowered
        or "authentication" in error_type
    ):
        return INVALID_API_KEY_ERROR_MESSAGE

    if "timeout" in lowered or "timed out" in lowered or "timeout" in error_type:
        return TIMEOUT_ERROR_MESSAGE

    return GENERIC_ERROR_MESSAGE
