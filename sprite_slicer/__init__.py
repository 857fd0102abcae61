"""Sprite sheet slicing: boundary detection and grid slicing."""
