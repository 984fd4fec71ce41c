"""Error taxonomy and classification of backend failures into user messages"""

from enum import Enum


class SessionError(Exception):
    """Base class for failures surfaced to the user through session state"""


class ValidationError(SessionError):
    """Missing dataset, empty query or an oversize upload"""


class ParseError(SessionError):
    """The uploaded dataset could not be parsed"""


class TransportError(SessionError):
    """A one-shot or streaming query to the AI service failed"""


class DashboardConfigError(TransportError):
    """The model returned chart specs that cannot be rendered"""


class ErrorCategory(Enum):
    AUTH_CONFIGURATION = "auth_configuration"
    RATE_LIMITED = "rate_limited"
    CONTENT_BLOCKED = "content_blocked"
    INVALID_DASHBOARD = "invalid_dashboard"
    BACKEND_INTERNAL = "backend_internal"
    UNEXPECTED = "unexpected"


USER_MESSAGES = {
    ErrorCategory.AUTH_CONFIGURATION: (
        "Your API key is not configured correctly. "
        "Please ensure it is set up properly in your environment."
    ),
    ErrorCategory.RATE_LIMITED: (
        "The service is currently busy due to high demand. "
        "Please wait a moment before trying again."
    ),
    ErrorCategory.CONTENT_BLOCKED: (
        "The response was blocked due to safety settings. Please modify your request."
    ),
    ErrorCategory.BACKEND_INTERNAL: (
        "An internal error occurred with the AI service. Please try again later."
    ),
    ErrorCategory.UNEXPECTED: (
        "An unexpected error occurred. Please check your network connection or try again."
    ),
}

# Checked in order, first match wins
_RULES = (
    (ErrorCategory.AUTH_CONFIGURATION, ("api key",)),
    (ErrorCategory.RATE_LIMITED, ("429", "resource has been exhausted")),
    (ErrorCategory.CONTENT_BLOCKED, ("safety",)),
    (ErrorCategory.INVALID_DASHBOARD, ("invalid dashboard configuration",)),
    (ErrorCategory.BACKEND_INTERNAL, ("500", "internal error")),
)


def classify_error(message: str) -> ErrorCategory:
    """Map raw failure text from the AI service to an error category"""
    text = (message or "").lower()
    for category, needles in _RULES:
        if any(needle in text for needle in needles):
            return category
    return ErrorCategory.UNEXPECTED


def friendly_error_message(message: str) -> str:
    """
    Get the message shown to the user for a failed query.

    Dashboard validation errors are already written for the user and pass
    through unchanged; every other category has a fixed message.
    """
    category = classify_error(message)
    if category is ErrorCategory.INVALID_DASHBOARD:
        return message
    return USER_MESSAGES[category]
