"""Command-line interface for pagecapture.

This package provides the CLI commands for pagecapture. Commands are organized
into modules by functionality:

- extract: Extract and classify saved pages (extract, classify)
- reparse: Re-parse saved record bodies (tasks, recipe)
"""

# Import all command modules to register them with the app
# The order doesn't matter - Click handles command registration
from pagecapture.cli import (
    extract,  # noqa: F401
    reparse,  # noqa: F401
)
from pagecapture.cli._common import app

__all__ = ["app"]
