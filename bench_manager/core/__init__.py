"""Reconciliation engine, capabilities and persistence."""
