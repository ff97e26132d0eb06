"""Parametric cross-reference matching and streaming parts-list validation."""

__version__ = "0.3.0"
