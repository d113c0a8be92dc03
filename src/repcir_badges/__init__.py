"""Repcir badge engine: catalog-driven achievement evaluation and awarding."""

__version__ = "0.1.0"
