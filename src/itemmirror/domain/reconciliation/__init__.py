"""Reconciliation of fragments against their item store."""

from __future__ import annotations

from .engine import ReconciliationEngine, ReconciliationResult

__all__ = ["ReconciliationEngine", "ReconciliationResult"]
