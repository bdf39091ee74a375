"""Remote package and repository descriptors.

The repository descriptor is fetched from ``<repository>/repository.json``
on every run and is never persisted locally.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from deployctl.core.errors import PackageNotFoundError


class Package(BaseModel):
    """A versioned, installable unit published by a repository.

    Attributes:
        name: Unique package identifier.
        display_name: Human-readable name.
        version: Dot-separated numeric version string.
        release_date: Release date as published.
        default: Whether the package is installed when no subset is requested.
        archive: Archive file name under ``packages/``.
        size: Archive size in bytes.
        sha1: Hex-encoded SHA-1 of the archive.
        script: Optional hook script file name under ``packages/``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: Annotated[str, Field(min_length=1, description="Unique package identifier")]
    display_name: Annotated[str, Field(description="Human-readable name")]
    version: Annotated[str, Field(min_length=1, description="Dot-separated numeric version")]
    release_date: Annotated[str, Field(description="Release date")] = ""
    default: Annotated[bool, Field(description="Installed by default")] = False
    archive: Annotated[str, Field(description="Archive file name under packages/")]
    size: Annotated[int, Field(ge=0, description="Archive size in bytes")] = 0
    sha1: Annotated[str, Field(description="Hex-encoded SHA-1 of the archive")]
    script: Annotated[str | None, Field(description="Hook script under packages/")] = None

    @field_validator("sha1")
    @classmethod
    def normalize_sha1(cls, value: str) -> str:
        return value.strip().lower()


class Repository(BaseModel):
    """Remote repository descriptor.

    Attributes:
        application_name: Name of the application the repository publishes.
        script: Optional global hook script, relative to the repository base.
        packages: Packages in publication order.
        size: Total size of all archives in bytes.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    application_name: Annotated[str, Field(description="Published application name")]
    script: Annotated[str | None, Field(description="Global hook script")] = None
    packages: Annotated[list[Package], Field(description="Packages in order")] = []
    size: Annotated[int, Field(ge=0, description="Total archive size in bytes")] = 0

    @model_validator(mode="after")
    def validate_unique_names(self) -> Repository:
        """Ensure package names are unique within the repository."""
        seen: set[str] = set()
        for package in self.packages:
            if package.name in seen:
                msg = f"Duplicate package name in repository: {package.name}"
                raise ValueError(msg)
            seen.add(package.name)
        return self

    def get_package(self, name: str) -> Package | None:
        """Look up a package by name."""
        for package in self.packages:
            if package.name == name:
                return package
        return None

    def get_default_packages(self) -> list[Package]:
        """Return the packages flagged as default, in repository order."""
        return [package for package in self.packages if package.default]

    def select(self, names: Iterable[str]) -> list[Package]:
        """Return the named packages in repository order.

        Args:
            names: Package names to select.

        Returns:
            Matching packages, ordered as published by the repository.

        Raises:
            PackageNotFoundError: If a name is not published by the repository.
        """
        wanted = set(names)
        known = {package.name for package in self.packages}
        missing = sorted(wanted - known)
        if missing:
            msg = f"Unknown package(s): {', '.join(missing)}"
            raise PackageNotFoundError(msg)
        return [package for package in self.packages if package.name in wanted]
