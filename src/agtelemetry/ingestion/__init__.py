"""Ingestion layer.

This package turns the untrusted ``GetUserStatus`` payload into domain
records: shape validation first, then normalization and pool clustering.
"""

__all__: list[str] = []
