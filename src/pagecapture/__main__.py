"""Allow ``python -m pagecapture``."""

from pagecapture.cli import app

if __name__ == "__main__":
    app()
