"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path
from unittest.mock import patch

import oper.core.theme as theme_module
import pytest
from oper.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_bundled_theme_path,
    get_rich_theme,
    load_theme,
    reload_theme,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.bar_background == "#29526d"
        assert colors.added == "#03b971"

    def test_short_hex_accepted(self) -> None:
        """ThemeColors accepts #RGB codes."""
        assert ThemeColors(hunk="#abc").hunk == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects invalid hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(removed="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(unknown_field="#ffffff")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for _load_toml_colors function."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields None."""
        assert _load_toml_colors(tmp_path / "none.toml") is None

    def test_bundled_theme_complete(self) -> None:
        """The bundled theme defines every color field."""
        colors = _load_toml_colors(Path(get_bundled_theme_path()))
        assert colors is not None
        assert set(colors) == set(ThemeColors.model_fields)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Unparsable files yield None."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n", encoding="utf-8")
        assert _load_toml_colors(path) is None


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_user_override(self, tmp_path: Path) -> None:
        """User colors override bundled ones, the rest stays bundled."""
        user = tmp_path / "theme.toml"
        user.write_text('[colors]\nselection = "#000000"\n', encoding="utf-8")

        with patch("oper.core.theme.get_user_theme_path", return_value=user):
            colors = load_theme()

        assert colors.selection == "#000000"
        assert colors.added == ThemeColors().added

    def test_invalid_user_theme_falls_back(self, tmp_path: Path) -> None:
        """An invalid user color falls back to the defaults."""
        user = tmp_path / "theme.toml"
        user.write_text('[colors]\nselection = "black"\n', encoding="utf-8")

        with patch("oper.core.theme.get_user_theme_path", return_value=user):
            colors = load_theme()

        assert colors == ThemeColors()


class TestRichTheme:
    """Tests for Rich theme generation and caching."""

    def test_styles(self) -> None:
        """Semantic message styles are defined."""
        theme = get_rich_theme(ThemeColors())
        assert isinstance(theme, Theme)
        for name in ("info", "warning", "error", "success"):
            assert name in theme.styles

    def test_reload_refreshes_cache(self, tmp_path: Path) -> None:
        """reload_theme replaces the cached colors."""
        with patch("oper.core.theme.get_user_theme_path", return_value=tmp_path / "none.toml"):
            reload_theme()
        assert theme_module._cached_colors == ThemeColors()
        assert theme_module._cached_theme is not None
