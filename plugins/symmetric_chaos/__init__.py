"""Symmetric chaos renderers: symmetric IFS, square quilts and symmetric icons."""
