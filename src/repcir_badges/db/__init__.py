"""Persistence layer for the badge engine."""

from .schema import SCHEMA

__all__ = ["SCHEMA"]
