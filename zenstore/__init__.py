"""Zen Store laptop storefront and admin console."""

__version__ = "0.3.0"
