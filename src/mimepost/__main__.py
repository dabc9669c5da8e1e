"""Entry point for ``python -m mimepost``."""

from mimepost.cli.app import app
from mimepost.meta import __app_name__


def main() -> None:
    """Run the mimepost CLI under its installed name."""
    app(prog_name=__app_name__)


if __name__ == "__main__":
    main()
