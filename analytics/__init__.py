"""Healthcare analytics dashboard logic (UI-agnostic).

This package contains:
- record normalization (raw CSV rows -> typed canonical records)
- grouping / reduction helpers
- filter criteria and the filtered subset
- summary view models for charts and the hospital map
- chart helpers (Altair -> Vega-Lite spec dict)
"""
