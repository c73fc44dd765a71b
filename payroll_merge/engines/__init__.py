"""Reconciliation, split and bank export engines."""
