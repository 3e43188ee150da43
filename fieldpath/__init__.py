"""Tile-grid pathfinding with an all-pairs path cache."""

__version__ = "0.1.0"
