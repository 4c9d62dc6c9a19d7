"""Hoops - arcade basketball simulation."""

__version__ = "0.1.0"
