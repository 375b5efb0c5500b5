"""Inventory ledger services: catalog access, audit trail, reconciliation, ledger."""
from app.services.audit import AuditTrail
from app.services.catalog import ProductCatalog
from app.services.reconciler import StockReconciler, ReconcileResult, signed_delta
from app.services.ledger import TransactionLedger, TransactionIntent, compute_total

__all__ = [
    "AuditTrail",
    "ProductCatalog",
    "StockReconciler",
    "ReconcileResult",
    "signed_delta",
    "TransactionLedger",
    "TransactionIntent",
    "compute_total",
]
