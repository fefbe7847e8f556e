"""Selector Audit — detect duplicate selector label-sets per namespace."""

__version__ = "0.1.0"
