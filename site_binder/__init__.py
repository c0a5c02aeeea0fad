"""
SiteBinder package initializer.
Defines package version and exposes the crawl-to-PDF entry point and CLI.
"""
__version__ = "0.1.0"

from site_binder.engine import crawl_to_document

# Expose CLI entry point
from .cli import cli  # экспорт для pytest

__all__ = ["__version__", "crawl_to_document", "cli"]
