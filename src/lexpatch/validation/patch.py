"""Structural validation of community patch documents.

A patch document looks like::

    {
      "metadata": {"version": "1.2.0", "name": "Real names", "author": "..."},
      "universal": {"countries": {...}},
      "languages": {"tr": {"trophies": {...}}}
    }

Validation is all-or-nothing: any error rejects the whole document, so a
patch touching one protected namespace is never partially applied. Warnings
are informational and never block acceptance. Validation never mutates its
input and never raises; every problem is reported through ValidationResult.

Python 3.13+.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

from lexpatch.constants import (
    DEFAULT_PATCH_VERSION,
    MAX_DEPTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PATCH_SIZE,
    MAX_STRING_LENGTH,
    PATCH_SIZE_WARNING_THRESHOLD,
    PATCHABLE_NAMESPACES,
)
from lexpatch.core.depth_guard import DepthGuard, DepthLimitExceededError
from lexpatch.core.tree import TranslationTree
from lexpatch.diagnostics import PatchErrorCode, ValidationError, ValidationResult
from lexpatch.locale_utils import is_known_language

__all__ = [
    "PatchDocument",
    "PatchMetadata",
    "PatchValidator",
    "create_patch_template",
    "get_patchable_namespaces",
    "validate_patch",
]

_VERSION_PATTERN_SOURCE = r"\d+\.\d+\.\d+(-[\w.]+)?"


def _format_size(size: int) -> str:
    """Render a byte count the way limits are usually quoted (5MB, 512 bytes)."""
    mib = 1024 * 1024
    if size >= mib:
        return f"{size / mib:g}MB"
    return f"{size} bytes"


class PatchMetadata(TypedDict):
    """``metadata`` section of a patch document."""

    version: str
    name: str
    author: NotRequired[str]
    description: NotRequired[str]
    compatibleGameVersion: NotRequired[str]
    language: NotRequired[str]


class PatchDocument(TypedDict):
    """Patch document wire format."""

    metadata: PatchMetadata
    universal: NotRequired[TranslationTree]
    languages: NotRequired[dict[str, TranslationTree]]


@dataclass(slots=True)
class _Findings:
    """Mutable accumulator for one validation run."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def error(self, path: str, message: str, code: PatchErrorCode) -> None:
        self.errors.append(ValidationError(path=path, message=message, code=code))

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def result(self) -> ValidationResult:
        return ValidationResult(errors=tuple(self.errors), warnings=tuple(self.warnings))


class PatchValidator:
    """Validates patch documents against the structural schema and allow-list.

    Example:
        >>> validator = PatchValidator()
        >>> doc = {"metadata": {"version": "1.0.0", "name": "x"}, "universal": {"ui": {}}}
        >>> [e.code for e in validator.validate(doc).errors]
        [<PatchErrorCode.PROTECTED_NAMESPACE: 'PROTECTED_NAMESPACE'>]
    """

    __slots__ = (
        "_check_language_codes",
        "_max_depth",
        "_max_description_length",
        "_max_name_length",
        "_max_patch_size",
        "_max_string_length",
        "_patchable_namespaces",
        "_size_warning_threshold",
        "_version_pattern",
    )

    def __init__(
        self,
        *,
        patchable_namespaces: Iterable[str] = PATCHABLE_NAMESPACES,
        max_string_length: int = MAX_STRING_LENGTH,
        max_name_length: int = MAX_NAME_LENGTH,
        max_description_length: int = MAX_DESCRIPTION_LENGTH,
        max_patch_size: int = MAX_PATCH_SIZE,
        size_warning_threshold: int = PATCH_SIZE_WARNING_THRESHOLD,
        max_depth: int = MAX_DEPTH,
        check_language_codes: bool = True,
    ) -> None:
        """Initialize validator.

        Args:
            patchable_namespaces: Allow-list of top-level namespaces
            max_string_length: Longest accepted string leaf
            max_name_length: Longest accepted metadata.name
            max_description_length: metadata.description length that triggers a warning
            max_patch_size: Serialized size above which a patch is rejected
            size_warning_threshold: Serialized size above which a warning is emitted
            max_depth: Deepest accepted nesting inside one namespace
            check_language_codes: Warn about language codes Babel does not know
        """
        if max_depth < 1:
            msg = f"max_depth must be at least 1, got {max_depth}"
            raise ValueError(msg)

        self._patchable_namespaces = frozenset(patchable_namespaces)
        self._max_string_length = max_string_length
        self._max_name_length = max_name_length
        self._max_description_length = max_description_length
        self._max_patch_size = max_patch_size
        self._size_warning_threshold = size_warning_threshold
        self._max_depth = max_depth
        self._check_language_codes = check_language_codes
        self._version_pattern = re.compile(_VERSION_PATTERN_SOURCE, re.ASCII)

    @property
    def patchable_namespaces(self) -> frozenset[str]:
        """Allow-list of top-level namespaces."""
        return self._patchable_namespaces

    def validate(self, document: object) -> ValidationResult:
        """Validate a complete patch document.

        Args:
            document: Candidate patch (usually parsed JSON)

        Returns:
            ValidationResult; valid iff no errors were found
        """
        if not isinstance(document, Mapping):
            return ValidationResult.failure(
                ValidationError(
                    path="",
                    message="Patch must be a non-null object",
                    code=PatchErrorCode.INVALID_PATCH_TYPE,
                )
            )

        findings = _Findings()

        self._validate_metadata(document.get("metadata"), findings)

        if "universal" in document:
            universal = document["universal"]
            if isinstance(universal, Mapping):
                self._validate_section(universal, "universal", findings)
            else:
                findings.error(
                    "universal",
                    "Universal section must be an object",
                    PatchErrorCode.INVALID_UNIVERSAL,
                )

        if "languages" in document:
            languages = document["languages"]
            if isinstance(languages, Mapping):
                self._validate_languages(languages, findings)
            else:
                findings.error(
                    "languages",
                    "Languages section must be an object",
                    PatchErrorCode.INVALID_LANGUAGES,
                )

        if "universal" not in document and "languages" not in document:
            findings.error(
                "",
                "Patch must have at least one of: universal, languages",
                PatchErrorCode.NO_CONTENT,
            )

        self._validate_size(document, findings)

        return findings.result()

    def _validate_metadata(self, metadata: object, findings: _Findings) -> None:
        if not isinstance(metadata, Mapping):
            findings.error(
                "metadata",
                "Metadata is required and must be an object",
                PatchErrorCode.MISSING_METADATA,
            )
            return

        version = metadata.get("version")
        if not isinstance(version, str):
            findings.error(
                "metadata.version",
                "Version is required and must be a string",
                PatchErrorCode.INVALID_VERSION,
            )
        elif self._version_pattern.fullmatch(version) is None:
            findings.error(
                "metadata.version",
                "Version must follow semver format (e.g., 1.0.0)",
                PatchErrorCode.INVALID_VERSION_FORMAT,
            )

        name = metadata.get("name")
        if not isinstance(name, str) or not name:
            findings.error(
                "metadata.name",
                "Name is required and must be a non-empty string",
                PatchErrorCode.INVALID_NAME,
            )
        elif len(name) > self._max_name_length:
            findings.error(
                "metadata.name",
                f"Name must be {self._max_name_length} characters or less",
                PatchErrorCode.NAME_TOO_LONG,
            )

        author = metadata.get("author")
        if author is not None and not isinstance(author, str):
            findings.warn("Author should be a string")

        description = metadata.get("description")
        if description is not None:
            if not isinstance(description, str):
                findings.warn("Description should be a string")
            elif len(description) > self._max_description_length:
                findings.warn("Description is very long, consider shortening")

    def _validate_languages(self, languages: Mapping[Any, Any], findings: _Findings) -> None:
        for language, content in languages.items():
            if not isinstance(language, str):
                findings.error(
                    "languages",
                    f"Language code must be a string, got {type(language).__name__}",
                    PatchErrorCode.INVALID_KEY,
                )
                continue

            path = f"languages.{language}"
            if self._check_language_codes and not is_known_language(language):
                findings.warn(f"Unrecognized language code '{language}' at {path}")

            if not isinstance(content, Mapping):
                findings.error(
                    path,
                    "Language section must be an object",
                    PatchErrorCode.INVALID_LANGUAGE_SECTION,
                )
                continue

            self._validate_section(content, path, findings)

    def _validate_section(
        self, content: Mapping[Any, Any], path: str, findings: _Findings
    ) -> None:
        """Validate one namespace-keyed section (universal or a language)."""
        allowed = ", ".join(sorted(self._patchable_namespaces))

        for namespace, values in content.items():
            if not isinstance(namespace, str):
                findings.error(
                    path,
                    f"Namespace must be a string, got {type(namespace).__name__}",
                    PatchErrorCode.INVALID_KEY,
                )
                continue

            namespace_path = f"{path}.{namespace}"

            if namespace not in self._patchable_namespaces:
                findings.error(
                    namespace_path,
                    f"Namespace '{namespace}' is not patchable. Allowed: {allowed}",
                    PatchErrorCode.PROTECTED_NAMESPACE,
                )
                continue

            if not isinstance(values, Mapping):
                findings.error(
                    namespace_path,
                    "Namespace value must be an object",
                    PatchErrorCode.INVALID_NAMESPACE_VALUE,
                )
                continue

            guard = DepthGuard(self._max_depth, label=namespace_path)
            try:
                self._validate_tree(values, namespace_path, findings, guard)
            except DepthLimitExceededError as e:
                findings.error(
                    namespace_path,
                    str(e),
                    PatchErrorCode.MAX_DEPTH_EXCEEDED,
                )

    def _validate_tree(
        self,
        node: Mapping[Any, Any],
        base_path: str,
        findings: _Findings,
        guard: DepthGuard,
    ) -> None:
        with guard:
            for key, value in node.items():
                if not isinstance(key, str):
                    findings.error(
                        base_path,
                        f"Key must be a string, got {type(key).__name__}",
                        PatchErrorCode.INVALID_KEY,
                    )
                    continue

                key_path = f"{base_path}.{key}"

                match value:
                    case None:
                        pass
                    case str():
                        self._validate_string(value, key_path, findings)
                    case Mapping():
                        self._validate_tree(value, key_path, findings, guard)
                    case list() | tuple():
                        self._validate_list(value, key_path, findings)
                    case _:
                        self._invalid_type(value, key_path, findings)

    def _validate_list(self, items: Sequence[Any], path: str, findings: _Findings) -> None:
        """Lists are opaque leaves; each element must be a string."""
        for index, item in enumerate(items):
            item_path = f"{path}[{index}]"
            match item:
                case None:
                    pass
                case str():
                    self._validate_string(item, item_path, findings)
                case _:
                    self._invalid_type(item, item_path, findings)

    def _validate_string(self, value: str, path: str, findings: _Findings) -> None:
        if not value:
            findings.warn(f"Empty string at {path}")
        elif len(value) > self._max_string_length:
            findings.error(
                path,
                f"String value exceeds maximum length of {self._max_string_length} characters",
                PatchErrorCode.STRING_TOO_LONG,
            )

    @staticmethod
    def _invalid_type(value: object, path: str, findings: _Findings) -> None:
        findings.error(
            path,
            f"Invalid value type: {type(value).__name__}. Only strings and objects are allowed",
            PatchErrorCode.INVALID_VALUE_TYPE,
        )

    def _validate_size(self, document: Mapping[Any, Any], findings: _Findings) -> None:
        try:
            serialized = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError):
            findings.error(
                "",
                "Patch cannot be serialized to JSON",
                PatchErrorCode.PATCH_NOT_SERIALIZABLE,
            )
            return

        size = len(serialized)
        if size > self._max_patch_size:
            findings.error(
                "",
                f"Patch exceeds maximum size of {_format_size(self._max_patch_size)}",
                PatchErrorCode.PATCH_TOO_LARGE,
            )
        elif size > self._size_warning_threshold:
            findings.warn(
                f"Patch is larger than {_format_size(self._size_warning_threshold)}, "
                "consider splitting into smaller patches"
            )


_DEFAULT_VALIDATOR = PatchValidator()


def validate_patch(document: object) -> ValidationResult:
    """Validate a patch document with the default allow-list and limits."""
    return _DEFAULT_VALIDATOR.validate(document)


def get_patchable_namespaces() -> list[str]:
    """Get the default allow-list of patchable namespaces, sorted."""
    return sorted(PATCHABLE_NAMESPACES)


def create_patch_template(name: str, author: str | None = None) -> PatchDocument:
    """Create an empty, valid patch document.

    Example:
        >>> create_patch_template("Real names")["metadata"]["version"]
        '1.0.0'
    """
    metadata: PatchMetadata = {
        "version": DEFAULT_PATCH_VERSION,
        "name": name,
        "description": "Community content patch",
    }
    if author is not None:
        metadata["author"] = author
    return {"metadata": metadata, "universal": {}, "languages": {}}
