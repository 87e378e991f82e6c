"""
Workspace access - the upstream REST API, its domain models, and the
run-scoped item cache.
"""

from pagewatch.workspace.models import Item, ItemKind, User, Workspace

__all__ = [
    "Item",
    "ItemKind",
    "User",
    "Workspace",
]
