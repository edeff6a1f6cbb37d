"""Allow running uigen as ``python -m uigen``."""

from uigen.cli.app import app

if __name__ == "__main__":
    app()
