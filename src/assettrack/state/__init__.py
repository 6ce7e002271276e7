"""State/store layer.

This package owns how reconciled records are persisted: the key-value
:class:`~assettrack.state.store.Store` seam, typed collection access and
the pure merge policy applied to each collection.
"""
