"""Unit tests for theme management."""

from pathlib import Path
from unittest.mock import patch

import pytest
from deployctl.core import theme
from deployctl.core.paths import get_config_dir
from deployctl.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    get_user_theme_path,
    load_theme,
)
from pydantic import ValidationError
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors model validation."""

    def test_default_values(self) -> None:
        colors = ThemeColors()
        assert colors.success == "#03b971"
        assert colors.outdated == "#faf870"

    @pytest.mark.parametrize("value", ["00ff00", "#12345", "#gggggg"])
    def test_invalid_hex(self, value: str) -> None:
        with pytest.raises(ValidationError):
            ThemeColors(success=value)

    def test_short_hex_accepted(self) -> None:
        assert ThemeColors(success="#0f0").success == "#0f0"

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ThemeColors.model_validate({"sparkle": "#ffffff"})


class TestLoadTomlColors:
    """Tests for _load_toml_colors helper."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nsuccess = "#00ff00"\nignored = 3\n')
        assert _load_toml_colors(path) == {"success": "#00ff00"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_toml_colors(tmp_path / "missing.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")
        assert _load_toml_colors(path) is None

    def test_missing_colors_section(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text('[other]\nkey = "value"\n')
        assert _load_toml_colors(path) == {}


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_loads_bundled_theme(self) -> None:
        assert load_theme() == ThemeColors()

    def test_user_theme_overrides_bundled(self) -> None:
        user_path = get_user_theme_path()
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text('[colors]\nerror = "#ff0000"\n')

        colors = load_theme()

        assert colors.error == "#ff0000"
        assert colors.success == ThemeColors().success

    def test_invalid_user_theme_falls_back_to_defaults(self) -> None:
        user_path = get_user_theme_path()
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text('[colors]\nerror = "red"\n')

        assert load_theme() == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_includes_semantic_styles(self) -> None:
        rich_theme = get_rich_theme(ThemeColors())
        for name in ("success", "warning", "error", "outdated", "progress", "package.name"):
            assert name in rich_theme.styles

    def test_uses_provided_colors(self) -> None:
        rich_theme = get_rich_theme(ThemeColors(current="#123456"))
        assert rich_theme.styles["current"].color is not None
        assert rich_theme.styles["current"].color.name == "#123456"


class TestGetTheme:
    """Tests for the cached theme accessor."""

    def test_caches_theme(self) -> None:
        with patch.object(theme, "_cached_theme", None):
            first = get_theme()
            second = get_theme()

        assert isinstance(first, Theme)
        assert first is second

    def test_user_theme_path(self) -> None:
        assert get_user_theme_path() == get_config_dir() / "theme.toml"
