"""Core (UI-agnostic) music catalog dashboard logic.

This package contains:
- data loading (two CSV catalogs -> one pandas DataFrame)
- filter normalization and the year-range state model
- aggregators producing JSON-serializable view-models
- chart helpers (Altair -> Vega-Lite spec dict)
"""
