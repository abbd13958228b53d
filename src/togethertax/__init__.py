"""TOGETHER TAX website backend: authenticated content API client and sitemap."""

__version__ = "0.1.0"
