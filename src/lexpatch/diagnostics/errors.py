"""lexpatch exception hierarchy.

Validation and sanitization never raise; these exceptions cover the few
places where the library signals failure through control flow.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "DepthLimitExceededError",
    "LexPatchError",
    "RemoteFetchError",
]


class LexPatchError(Exception):
    """Base exception for all lexpatch errors."""


class DepthLimitExceededError(LexPatchError):
    """Raised when a traversal exceeds its configured maximum depth.

    Indicates either adversarial input designed to exhaust the stack or a
    structure nested far beyond anything a translation tree needs.
    """


class RemoteFetchError(LexPatchError):
    """Remote content endpoint answered with a non-success status.

    Caught by the loader, which then falls back to the persisted snapshot.

    Attributes:
        url: Requested URL
        status: HTTP status code received
    """

    def __init__(self, url: str, status: int) -> None:
        """Initialize RemoteFetchError.

        Args:
            url: Requested URL
            status: HTTP status code received
        """
        super().__init__(f"HTTP {status} fetching {url}")
        self.url = url
        self.status = status
