"""deployctl - journaled install, update and uninstall engine for desktop products."""

__version__ = "0.1.0"
