"""Parsing and construction of individual Multiboot2 boot information tags."""

__version__ = "0.1.0"