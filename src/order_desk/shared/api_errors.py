"""
API error type and response-body parsing.

Every transport, server and response-shape failure surfaces as one error kind,
``ApiError``, carrying a human-readable message. Callers decide how to present
it (inline message, retry affordance, CLI exit status).
"""

from typing import Any

import httpx

NETWORK_ERROR_MESSAGE = "Network error"
GENERIC_ERROR_MESSAGE = "Something went wrong"
INVALID_RESPONSE_MESSAGE = "Invalid response from server"


class ApiError(Exception):
    """Raised when a request to the backend fails for any reason."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_network_error(self) -> bool:
        """True when no HTTP response was received."""
        return self.status_code is None


def extract_error_message(response: httpx.Response) -> str:
    """
    Extract the message from a non-2xx response.

    Args:
        response: The failed HTTP response.

    Returns:
        The body's ``message`` field; ``"Network error"`` when the body is not
        JSON; ``"Something went wrong"`` when JSON carries no usable message.
    """
    try:
        body: Any = response.json()
    except ValueError:
        return NETWORK_ERROR_MESSAGE
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return GENERIC_ERROR_MESSAGE


def error_from_response(response: httpx.Response) -> ApiError:
    """Build an ApiError from a non-2xx response."""
    return ApiError(extract_error_message(response), status_code=response.status_code)
