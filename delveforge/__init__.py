"""Delveforge - procedural encounter and dungeon map generation."""

__version__ = "0.1.0"
