"""Shared domain components - Generic patterns and utilities."""

from keeper.domains.shared.repository import GenericRepository

__all__ = ["GenericRepository"]
