"""HTTP API for the Coach Running engine."""

from .exception_handlers import register_exception_handlers

__all__ = ["register_exception_handlers"]
