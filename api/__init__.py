"""
Ledgerman REST API.

Provides DRF ViewSets for:
- Obligation (full CRUD + cancel, summary)
- Collection (full CRUD + status, reconcile)
- Reconciliation (read-only)
"""
