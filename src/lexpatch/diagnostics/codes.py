"""Diagnostic codes for patch validation.

Python 3.13+. Zero external dependencies.
"""

from enum import StrEnum

__all__ = ["PatchErrorCode"]


class PatchErrorCode(StrEnum):
    """Error codes reported by PatchValidator and the loader apply operations.

    Inherits from ``StrEnum`` so that ``code == "PROTECTED_NAMESPACE"`` works
    and serialized results carry plain strings.

    Organized by the part of the document they describe:
        Document: shape of the top-level object
        Metadata: the ``metadata`` section
        Content: ``universal`` / ``languages`` sections and their trees
        Limits: size and depth constraints
        Loader: failures detected after validation
    """

    # Document
    INVALID_PATCH_TYPE = "INVALID_PATCH_TYPE"
    NO_CONTENT = "NO_CONTENT"

    # Metadata
    MISSING_METADATA = "MISSING_METADATA"
    INVALID_VERSION = "INVALID_VERSION"
    INVALID_VERSION_FORMAT = "INVALID_VERSION_FORMAT"
    INVALID_NAME = "INVALID_NAME"
    NAME_TOO_LONG = "NAME_TOO_LONG"

    # Content
    INVALID_UNIVERSAL = "INVALID_UNIVERSAL"
    INVALID_LANGUAGES = "INVALID_LANGUAGES"
    INVALID_LANGUAGE_SECTION = "INVALID_LANGUAGE_SECTION"
    PROTECTED_NAMESPACE = "PROTECTED_NAMESPACE"
    INVALID_NAMESPACE_VALUE = "INVALID_NAMESPACE_VALUE"
    INVALID_KEY = "INVALID_KEY"
    INVALID_VALUE_TYPE = "INVALID_VALUE_TYPE"
    STRING_TOO_LONG = "STRING_TOO_LONG"

    # Limits
    PATCH_TOO_LARGE = "PATCH_TOO_LARGE"
    PATCH_NOT_SERIALIZABLE = "PATCH_NOT_SERIALIZABLE"
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"

    # Loader
    SANITIZE_FAILED = "SANITIZE_FAILED"
