"""Tests for locale_utils.py.

Python 3.13+.
"""

from __future__ import annotations

import pytest
from babel import Locale
from hypothesis import given
from hypothesis import strategies as st

from lexpatch.locale_utils import (
    get_babel_locale,
    get_language_display_name,
    is_known_language,
    normalize_locale,
    validate_language_code,
)


class TestNormalizeLocale:
    """Test normalize_locale."""

    def test_bcp47_to_posix(self) -> None:
        """Hyphens become underscores."""
        assert normalize_locale("pt-BR") == "pt_BR"

    def test_simple_code_unchanged(self) -> None:
        """Codes without region are unchanged."""
        assert normalize_locale("tr") == "tr"


class TestBabelLookups:
    """Test Babel-backed helpers."""

    def test_get_babel_locale(self) -> None:
        """Known codes parse to Babel Locale objects."""
        locale = get_babel_locale("pt-BR")

        assert isinstance(locale, Locale)
        assert locale.language == "pt"
        assert locale.territory == "BR"

    @pytest.mark.parametrize("code", ["en", "tr", "de", "pt_BR", "pt-BR", "ja"])
    def test_known_languages(self, code: str) -> None:
        """CLDR languages are known."""
        assert is_known_language(code)

    @pytest.mark.parametrize("code", ["zz", "", "x!", "123"])
    def test_unknown_languages(self, code: str) -> None:
        """Unknown or malformed codes are not known."""
        assert not is_known_language(code)

    def test_non_string_not_known(self) -> None:
        """Non-strings are never known."""
        assert not is_known_language(None)  # type: ignore[arg-type]

    def test_display_name_in_own_language(self) -> None:
        """Default display locale is the language itself."""
        assert get_language_display_name("de") == "Deutsch"

    def test_display_name_in_other_language(self) -> None:
        """display_locale selects the language of the name."""
        assert get_language_display_name("tr", "en") == "Turkish"

    def test_display_name_unknown(self) -> None:
        """Unknown languages have no display name."""
        assert get_language_display_name("zz") is None


class TestValidateLanguageCode:
    """Test boundary validation of language codes."""

    @pytest.mark.parametrize("code", ["en", "pt-BR", "zh_Hans", "tlh"])
    def test_accepts_well_formed(self, code: str) -> None:
        """Well-formed codes are returned unchanged, known or not."""
        assert validate_language_code(code) == code

    @pytest.mark.parametrize(
        ("code", "match"),
        [
            ("", "empty"),
            (" en", "whitespace"),
            ("../en", "Path separators"),
            ("en/US", "Path separators"),
            ("en\\US", "Path separators"),
            ("en?x=1", "Invalid characters"),
        ],
    )
    def test_rejects_unsafe(self, code: str, match: str) -> None:
        """Unsafe codes raise ValueError."""
        with pytest.raises(ValueError, match=match):
            validate_language_code(code)

    @given(st.text(min_size=1, max_size=10))
    def test_accepted_codes_are_path_safe(self, code: str) -> None:
        """PROPERTY: any accepted code is safe inside a URL path segment."""
        try:
            validate_language_code(code)
        except ValueError:
            return
        assert "/" not in code
        assert ".." not in code
        assert code.strip() == code
