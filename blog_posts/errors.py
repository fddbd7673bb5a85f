# blog_posts/errors.py
"""
Domain errors for the blog post resource.

Routes translate these into client errors; anything else raised by the
store is logged with a short correlation id and reported as a generic
server error.
"""
import logging
import uuid
from typing import Optional

logger = logging.getLogger(__name__)


class BlogServiceError(Exception):
    """Base class for errors raised by the post store and mapper."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogServiceError):
    """A create or update payload is missing a required field or has an empty one."""

    status_code = 400


class NotFoundError(BlogServiceError):
    """No post exists with the requested id."""

    status_code = 404

    def __init__(self, post_id: str):
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return a sanitized message for the client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Create post")
        user_message: Optional custom message to show the client

    Returns:
        Tuple of (sanitized_message, error_id)
    """
    error_id = uuid.uuid4().hex[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {error}",
        exc_info=error
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id
