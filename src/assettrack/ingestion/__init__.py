"""Ingestion layer.

This package turns raw webhook payloads into normalized field sets and
reconciles them into the store.
"""

__all__: list[str] = []
