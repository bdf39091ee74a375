"""Allow running deployctl as ``python -m deployctl``.

The maintenance tool launcher placed in an install directory re-enters
the CLI through this module.
"""

from deployctl.cli.main import app

if __name__ == "__main__":
    app()
