"""Product and repository descriptor I/O.

The product descriptor is a TOML file; the repository descriptor is
JSON fetched from the repository base URI. Both are placeholder-expanded
before validation.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import ValidationError

from deployctl.core.errors import SerializationError
from deployctl.core.paths import PRODUCT_FILENAME
from deployctl.models.package import Repository
from deployctl.models.product import Product

if TYPE_CHECKING:
    from deployctl.core.formatter import TemplateFormat


class ProductNotFoundError(SerializationError):
    """Raised when the product descriptor file does not exist."""


def find_product_path(explicit: Path | None = None, cwd: Path | None = None) -> Path:
    """Resolve the product descriptor to use.

    Args:
        explicit: Path given by the caller, used as-is when set.
        cwd: Directory to look in otherwise (defaults to the working directory).

    Returns:
        Path to the product descriptor.
    """
    if explicit is not None:
        return explicit
    return (cwd or Path.cwd()) / PRODUCT_FILENAME


def load_product(path: Path) -> Product:
    """Load and expand a product descriptor.

    Args:
        path: Path to ``product.toml``.

    Returns:
        Validated Product with placeholders expanded.

    Raises:
        ProductNotFoundError: If the file doesn't exist.
        SerializationError: If the file cannot be parsed or validated.
    """
    if not path.exists():
        raise ProductNotFoundError(f"Product descriptor not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SerializationError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise SerializationError(f"Failed to read product descriptor: {e}") from e

    product_data: Any = data.get("product", data)
    try:
        product = Product.model_validate(product_data)
    except ValidationError as e:
        raise SerializationError(f"Invalid product descriptor: {e}") from e
    return product.expanded()


def product_to_toml(product: Product) -> str:
    """Render a product descriptor as TOML text."""
    payload = product.model_dump(exclude_none=True)
    return tomli_w.dumps({"product": payload})


def save_product(product: Product, path: Path) -> Path:
    """Write a product descriptor atomically.

    Returns:
        Path where the descriptor was saved.

    Raises:
        SerializationError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(product_to_toml(product))
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SerializationError(f"Failed to write product descriptor: {e}") from e
    return path


def parse_repository(text: str, formatter: TemplateFormat | None = None) -> Repository:
    """Parse a fetched repository descriptor.

    Raises:
        SerializationError: If the descriptor is not valid.
    """
    if formatter is not None:
        text = formatter.format_json(text)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid repository descriptor JSON: {e}") from e
    try:
        return Repository.model_validate(payload)
    except ValidationError as e:
        raise SerializationError(f"Invalid repository descriptor: {e}") from e
