"""Validation and sanitization of untrusted patch content.

Python 3.13+.
"""

from .patch import (
    PatchDocument,
    PatchMetadata,
    PatchValidator,
    create_patch_template,
    get_patchable_namespaces,
    validate_patch,
)
from .sanitizer import (
    Sanitizer,
    escape_html,
    filter_protected_namespaces,
    is_protected_namespace,
    is_valid_translation_string,
    remove_dangerous_patterns,
    sanitize_object,
    sanitize_patch,
    sanitize_string,
    strip_html_tags,
)

__all__ = [
    "PatchDocument",
    "PatchMetadata",
    "PatchValidator",
    "Sanitizer",
    "create_patch_template",
    "escape_html",
    "filter_protected_namespaces",
    "get_patchable_namespaces",
    "is_protected_namespace",
    "is_valid_translation_string",
    "remove_dangerous_patterns",
    "sanitize_object",
    "sanitize_patch",
    "sanitize_string",
    "strip_html_tags",
    "validate_patch",
]
