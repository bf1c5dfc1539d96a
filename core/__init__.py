"""Core (UI-agnostic) realm dashboard logic.

This package contains:
- realm ingestion (pasted JSON / fixture files -> immutable realms)
- resource catalog ordering and military unit classification
- matrix and military summary builders
- view parameters, row sorting and search
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
