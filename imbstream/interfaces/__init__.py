"""Interfaces for imbstream components."""

from imbstream.interfaces.registry import Registry

__all__ = ["Registry"]
