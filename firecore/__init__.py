"""Core (UI-agnostic) wildfire explorer logic.

This package contains:
- record validation and derivation (raw CSV rows -> enriched record set)
- the shared filter state and the filtered view
- per-view compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
