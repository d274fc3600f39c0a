"""Spoken-language proficiency assessment pipeline."""

__version__ = "1.0.0"
