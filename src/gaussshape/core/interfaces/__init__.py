"""Interfaces shared across the core and infrastructure layers."""

from .repository import Repository

__all__ = ["Repository"]
