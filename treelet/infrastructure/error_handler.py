"""
Exception hierarchy and error translation helpers for Treelet.

Remote failures surface from the service layer as ``DownloadError``
subclasses so the orchestrator can tell a failed listing apart from a
legitimately empty directory.
"""

import functools
import inspect
from typing import Any, Callable, Optional, Tuple, Type

import httpx


####
##      EXCEPTIONS
#####
class DownloadError(Exception):
    """Base error for any failed remote or local download operation."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class RateLimitError(DownloadError):
    """The GitLab API refused the request because of rate limiting."""


class AuthenticationError(DownloadError):
    """The access token is missing, invalid or lacks permissions."""


class RepositoryNotFoundError(DownloadError):
    """The project, ref or path does not exist on the remote."""


class RevisionLookupError(DownloadError):
    """The latest revision id of a ref could not be resolved."""


RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.RequestError,
    RateLimitError,
    ConnectionError,
    TimeoutError,
)


def translate_error(error: Exception) -> DownloadError:
    """Map a transport-level exception onto the Treelet hierarchy."""

    if isinstance(error, DownloadError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        url = error.request.url
        if status == 429:
            return RateLimitError(f"Rate limit exceeded for {url}", error)
        if status in (401, 403):
            return AuthenticationError(
                f"Access denied ({status}) for {url}", error
            )
        if status == 404:
            return RepositoryNotFoundError(f"Not found: {url}", error)
        return DownloadError(f"GitLab API error {status} for {url}", error)

    if isinstance(error, httpx.RequestError):
        if "429" in str(error):
            return RateLimitError("Rate limit exceeded", error)
        return DownloadError(f"Network error: {error}", error)

    return DownloadError(f"Unexpected error: {error}", error)


def handle_api_error(func: Callable) -> Callable:
    """
    Decorator translating HTTP and transport errors into DownloadError
    subclasses. Works on both plain and coroutine functions.
    """

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                raise translate_error(e) from e

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            raise translate_error(e) from e

    return wrapper


__all__ = [
    "DownloadError",
    "RateLimitError",
    "AuthenticationError",
    "RepositoryNotFoundError",
    "RevisionLookupError",
    "RETRYABLE_ERRORS",
    "translate_error",
    "handle_api_error",
]
