"""Board resolution engine for the Blockwars match-three battle game."""

__version__ = "0.1.0"
