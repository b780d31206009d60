"""Composing callers of the viewer core."""

from .session import ViewerSession

__all__ = ['ViewerSession']
