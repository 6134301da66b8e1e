"""Language code utilities backed by Babel's CLDR data.

Language codes arrive from untrusted patch documents and are embedded in
remote URLs and storage keys, so they are checked at the boundary.

Python 3.13+.
"""

from __future__ import annotations

import functools

from babel import Locale, UnknownLocaleError

__all__ = [
    "get_babel_locale",
    "get_language_display_name",
    "is_known_language",
    "normalize_locale",
    "validate_language_code",
]


def normalize_locale(locale_code: str) -> str:
    """Convert BCP-47 locale code to POSIX format for Babel.

    Example:
        >>> normalize_locale("pt-BR")
        'pt_BR'
        >>> normalize_locale("en")
        'en'
    """
    return locale_code.replace("-", "_")


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    return Locale.parse(normalize_locale(locale_code))


def is_known_language(locale_code: str) -> bool:
    """Check whether Babel recognizes a language code.

    Example:
        >>> is_known_language("tr")
        True
        >>> is_known_language("klingon-xx")
        False
    """
    if not isinstance(locale_code, str) or not locale_code:
        return False
    try:
        get_babel_locale(locale_code)
    except (UnknownLocaleError, ValueError, TypeError):
        return False
    return True


def get_language_display_name(locale_code: str, display_locale: str | None = None) -> str | None:
    """Get the human-readable name of a language.

    Args:
        locale_code: Language to describe
        display_locale: Language to describe it in (default: itself)

    Returns:
        Display name, or None if Babel does not know the language

    Example:
        >>> get_language_display_name("tr", "en")
        'Turkish'
    """
    if not is_known_language(locale_code):
        return None
    locale = get_babel_locale(locale_code)
    if display_locale is not None and is_known_language(display_locale):
        return locale.get_display_name(get_babel_locale(display_locale))
    return locale.get_display_name()


def validate_language_code(locale_code: str) -> str:
    """Validate a language code used in URLs and storage keys.

    Unknown-but-well-formed codes are accepted; only codes that could
    escape a URL path segment or storage key are rejected.

    Args:
        locale_code: Language code to validate

    Returns:
        The unchanged code

    Raises:
        ValueError: If the code is empty, padded with whitespace, or contains
            path separators, traversal sequences or other unsafe characters
    """
    if not isinstance(locale_code, str) or not locale_code:
        msg = "Language code cannot be empty"
        raise ValueError(msg)
    if locale_code.strip() != locale_code:
        msg = f"Language code contains leading/trailing whitespace: {locale_code!r}"
        raise ValueError(msg)
    if ".." in locale_code or "/" in locale_code or "\\" in locale_code:
        msg = f"Path separators not allowed in language code: {locale_code!r}"
        raise ValueError(msg)
    if not all(ch.isalnum() or ch in "-_" for ch in locale_code):
        msg = f"Invalid characters in language code: {locale_code!r}"
        raise ValueError(msg)
    return locale_code
