"""extscan: security red-flag scanner for extension file trees."""

__version__ = "1.0.0"
