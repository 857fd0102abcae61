#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "numpy",
#     "pillow",
#     "scipy",
# ]
# ///
"""
Slice a sprite sheet into individual sprites.

Standalone entry point for `uv run extract.py sheet.png --detect`; takes the
same arguments as the `sprite-slicer` command.
"""

from sprite_slicer.cli import main

if __name__ == "__main__":
    main()
