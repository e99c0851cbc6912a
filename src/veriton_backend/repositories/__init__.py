"""
Repository layer for direct database access.

The entity store applies the principal's scope predicate to every query it
runs; application services sit on top of it.
"""

from .base import (
    EntityStore,
    RepositoryError,
    NotFoundError,
    DuplicateError,
    ValidationFailedError,
    DependencyConflictError,
)

__all__ = [
    'EntityStore',
    'RepositoryError',
    'NotFoundError',
    'DuplicateError',
    'ValidationFailedError',
    'DependencyConflictError',
]
