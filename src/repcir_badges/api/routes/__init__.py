"""API route modules."""

from . import badges

__all__ = ["badges"]
