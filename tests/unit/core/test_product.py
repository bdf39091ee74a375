"""Unit tests for product and repository descriptor I/O."""

import json
from pathlib import Path

import pytest
from deployctl.core.errors import SerializationError
from deployctl.core.formatter import TemplateFormat
from deployctl.core.product import (
    ProductNotFoundError,
    find_product_path,
    load_product,
    parse_repository,
    product_to_toml,
    save_product,
)
from deployctl.models.product import Product


class TestLoadProduct:
    """Tests for load_product."""

    def test_product_table(self, tmp_path: Path) -> None:
        path = tmp_path / "product.toml"
        path.write_text(
            '[product]\nname = "demo"\nrepository = "https://example.com/demo"\n'
            'target_directory = "@{Directories.User.Home}/Demo"\n'
        )

        product = load_product(path)

        assert product.name == "demo"
        assert product.repository == "https://example.com/demo/"
        assert product.target_path == Path.home() / "Demo"

    def test_top_level_keys(self, tmp_path: Path) -> None:
        """The [product] table is optional."""
        path = tmp_path / "product.toml"
        path.write_text('name = "demo"\nrepository = "/srv/repo"\ntarget_directory = "/opt/demo"\n')
        assert load_product(path).target_directory == "/opt/demo"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProductNotFoundError):
            load_product(tmp_path / "product.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "product.toml"
        path.write_text("[product\n")
        with pytest.raises(SerializationError, match="Invalid TOML"):
            load_product(path)

    def test_missing_required_field(self, tmp_path: Path) -> None:
        path = tmp_path / "product.toml"
        path.write_text('[product]\nname = "demo"\n')
        with pytest.raises(SerializationError, match="Invalid product descriptor"):
            load_product(path)

    def test_save_round_trip(self, product: Product, tmp_path: Path) -> None:
        path = save_product(product, tmp_path / "install" / "product.toml")
        assert load_product(path) == product
        assert "[product]" in product_to_toml(product)


class TestFindProductPath:
    """Tests for find_product_path."""

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        explicit = tmp_path / "custom.toml"
        assert find_product_path(explicit, tmp_path / "elsewhere") == explicit

    def test_defaults_to_working_directory(self, tmp_path: Path) -> None:
        assert find_product_path(cwd=tmp_path) == tmp_path / "product.toml"


class TestParseRepository:
    """Tests for parse_repository."""

    def test_valid_descriptor(self) -> None:
        text = json.dumps(
            {
                "application_name": "demo",
                "packages": [
                    {
                        "name": "core",
                        "display_name": "Core",
                        "version": "1.0",
                        "archive": "core-1.0.zip",
                        "sha1": "00",
                    }
                ],
            }
        )
        repository = parse_repository(text)
        assert repository.packages[0].archive == "core-1.0.zip"

    def test_placeholders_expanded(self) -> None:
        text = '{"application_name": "@{App.Name}", "packages": []}'
        repository = parse_repository(text, TemplateFormat({"App.Name": "demo"}))
        assert repository.application_name == "demo"

    def test_invalid_json(self) -> None:
        with pytest.raises(SerializationError, match="Invalid repository descriptor JSON"):
            parse_repository("<html>")

    def test_invalid_content(self) -> None:
        with pytest.raises(SerializationError, match="Invalid repository descriptor"):
            parse_repository('{"packages": []}')
