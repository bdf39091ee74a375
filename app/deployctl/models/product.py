"""Product descriptor model.

The product descriptor identifies the deployment target. It is read from
``product.toml`` and written into the install directory so later
maintenance runs are self-describing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from deployctl.core.formatter import TemplateFormat

REPOSITORY_DESCRIPTOR = "repository.json"
PACKAGES_DIR = "packages"


class Product(BaseModel):
    """Deployment target identity.

    Attributes:
        name: Product identifier, also used for app-entry names.
        title: Human-readable product title.
        publisher: Publisher name.
        product_url: Product homepage.
        repository: Repository base URI (http(s), file:// or a local path).
        target_directory: Default install directory.
        script: Optional global hook script, relative to the repository base.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Product identifier")]
    title: Annotated[str, Field(description="Human-readable title")] = ""
    publisher: Annotated[str, Field(description="Publisher name")] = ""
    product_url: Annotated[str, Field(description="Product homepage")] = ""
    repository: Annotated[str, Field(min_length=1, description="Repository base URI")]
    target_directory: Annotated[str, Field(min_length=1, description="Install directory")]
    script: Annotated[str | None, Field(description="Global hook script")] = None

    @field_validator("repository")
    @classmethod
    def ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    @property
    def display_title(self) -> str:
        return self.title or self.name

    @property
    def target_path(self) -> Path:
        return Path(self.target_directory).expanduser()

    def create_formatter(self) -> TemplateFormat:
        """Build the placeholder formatter for this product."""
        return TemplateFormat.for_product(self)

    def expanded(self) -> Product:
        """Return a copy with ``@{...}`` placeholders expanded in every text field."""
        formatter = self.create_formatter()
        updates = {
            field: formatter.format(value)
            for field, value in self.model_dump().items()
            if isinstance(value, str)
        }
        return self.model_copy(update=updates)

    def repository_url(self) -> str:
        return f"{self.repository}{REPOSITORY_DESCRIPTOR}"

    def package_url(self, archive: str) -> str:
        return f"{self.repository}{PACKAGES_DIR}/{archive}"

    def package_hash_url(self, archive: str) -> str:
        return f"{self.package_url(archive)}.sha1"

    def package_script_url(self, script: str) -> str:
        return f"{self.repository}{PACKAGES_DIR}/{script}"

    def global_script_url(self, script: str) -> str:
        return f"{self.repository}{script}"
