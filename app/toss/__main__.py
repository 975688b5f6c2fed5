"""Allow running toss as ``python -m toss``."""

from toss.cli.main import app

if __name__ == "__main__":
    app()
