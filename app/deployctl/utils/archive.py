"""Zip archive extraction.

Extracts package archives entry by entry, reporting progress and the
list of created paths so the extraction can be reverted.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from deployctl.core.errors import ArchiveError

logger = logging.getLogger(__name__)

ENCRYPTED_FLAG = 0x1


@dataclass(slots=True)
class ExtractionResult:
    """Paths created by an extraction, relative to the destination.

    Attributes:
        files: Extracted files in extraction order.
        directories: Directories that did not exist before, in creation order.
    """

    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)


def _safe_relative(name: str) -> PurePosixPath | None:
    """Normalize an entry name, rejecting absolute or escaping paths."""
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        return None
    parts = [part for part in path.parts if part not in ("", ".")]
    if not parts:
        return None
    return PurePosixPath(*parts)


def _ensure_directory(destination: Path, relative: PurePosixPath, result: ExtractionResult) -> None:
    current = destination
    for part in relative.parts:
        current = current / part
        if not current.exists():
            current.mkdir()
            result.directories.append(current.relative_to(destination).as_posix())


def extract_zip(
    archive: Path,
    destination: Path,
    progress: Callable[[float], None] | None = None,
    on_file: Callable[[str], None] | None = None,
) -> ExtractionResult:
    """Extract a zip archive into a directory.

    Directory entries are not recorded as files. Entries that would
    escape the destination are skipped.

    Args:
        archive: Path to the zip file.
        destination: Directory to extract into (created if missing).
        progress: Optional callback receiving percentage complete.
        on_file: Optional callback invoked with each extracted file.

    Returns:
        ExtractionResult listing created files and directories.

    Raises:
        ArchiveError: If the archive is invalid, encrypted or uses an
            unsupported compression method.
    """
    result = ExtractionResult()
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive) as zf:
            entries = zf.infolist()
            total = len(entries)
            for index, info in enumerate(entries, start=1):
                relative = _safe_relative(info.filename)
                if relative is None:
                    logger.warning("Skipping unsafe archive entry: %s", info.filename)
                elif info.flag_bits & ENCRYPTED_FLAG:
                    msg = f"Archive {archive.name} is password protected"
                    raise ArchiveError(msg)
                elif info.is_dir():
                    _ensure_directory(destination, relative, result)
                else:
                    _ensure_directory(destination, relative.parent, result)
                    target = destination / relative
                    with zf.open(info) as src, open(target, "wb") as dst:
                        while chunk := src.read(1024 * 1024):
                            dst.write(chunk)
                    result.files.append(relative.as_posix())
                    logger.debug("Extracted %s", relative)
                    if on_file is not None:
                        on_file(relative.as_posix())
                if progress is not None and total:
                    progress(index * 100.0 / total)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Invalid archive {archive.name}: {e}") from e
    except NotImplementedError as e:
        raise ArchiveError(f"Unsupported archive {archive.name}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Cannot extract {archive.name}: {e}") from e
    if progress is not None:
        progress(100.0)
    return result
