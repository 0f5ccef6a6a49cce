# site_digest/__init__.py
"""
SiteDigest package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from site_digest.cli import cli  # noqa: E402

__all__ = ["__version__", "cli"]
