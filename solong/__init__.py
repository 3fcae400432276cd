"""A two-level top-down dungeon puzzle game played on .ber tile maps."""

__version__ = "0.1.0"