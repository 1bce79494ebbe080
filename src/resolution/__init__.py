"""Dependency graph resolution and manifest reconciliation."""

from .aliases import AliasResolver
from .reconciler import ReconcileResult, reconcile
from .walker import DependencyGraphWalker

__all__ = ["AliasResolver", "DependencyGraphWalker", "ReconcileResult", "reconcile"]
