"""Domain interfaces."""

from .objective_function import ObjectiveFunction

__all__ = ["ObjectiveFunction"]
