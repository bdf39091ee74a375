"""XDG-compliant path management for deployctl.

User-level files follow the XDG Base Directory Specification:
- Config: ~/.config/deployctl/
- Cache: ~/.cache/deployctl/ (downloaded archives and scripts)
- Data: ~/.local/share/applications/ (desktop entries)

Per-installation files (journal, product descriptor) live in the
install directory itself.
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "deployctl"

# Files kept inside an install directory
SUMMARY_FILENAME = "deployctl_summary.json"
PRODUCT_FILENAME = "product.toml"
LOCK_SUFFIX = ".lock"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting the environment variable override."""
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get the application-specific XDG directory.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    return _get_xdg_base(env_var, default_subdir) / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/deployctl/ (or XDG_CONFIG_HOME/deployctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Get the cache directory path.

    Returns:
        Path to ~/.cache/deployctl/ (or XDG_CACHE_HOME/deployctl/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Get the user configuration file path.

    Returns:
        Path to ~/.config/deployctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_script_store_path() -> Path:
    """Get the key/value store used by hook scripts.

    Returns:
        Path to ~/.config/deployctl/script-store.toml.
    """
    return get_config_dir() / "script-store.toml"


def get_download_dir() -> Path:
    """Get the download cache directory.

    Returns:
        Path to ~/.cache/deployctl/downloads/.
    """
    return get_cache_dir() / "downloads"


def get_applications_dir() -> Path:
    """Get the freedesktop applications directory for desktop entries.

    Returns:
        Path to ~/.local/share/applications/ (or XDG_DATA_HOME/applications/).
    """
    return _get_xdg_base("XDG_DATA_HOME", ".local/share") / "applications"


def get_summary_path(install_dir: Path) -> Path:
    """Get the installation summary path inside an install directory."""
    return install_dir / SUMMARY_FILENAME


def get_product_path(install_dir: Path) -> Path:
    """Get the product descriptor path inside an install directory."""
    return install_dir / PRODUCT_FILENAME


def get_lock_path(summary_path: Path) -> Path:
    """Get the advisory lock file guarding a summary file."""
    return summary_path.with_name(summary_path.name + LOCK_SUFFIX)


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_download_dir() -> Path:
    """Create the download cache directory if it doesn't exist.

    Returns:
        Path to the download cache directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_download_dir(), "download cache")


def ensure_applications_dir() -> Path:
    """Create the desktop applications directory if it doesn't exist.

    Returns:
        Path to the applications directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_applications_dir(), "applications")
