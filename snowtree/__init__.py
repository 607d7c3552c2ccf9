"""Falling snow, a breathing dot tree, emoji stickers and shareable links."""

__version__ = "0.1.0"
