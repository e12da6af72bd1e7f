"""CMS API for the hospital planning portal."""

__version__ = "0.1.0"
