"""Persistence models."""

from .oauth import TokenRecord

__all__ = ["TokenRecord"]
