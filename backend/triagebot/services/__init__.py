"""Services Layer - handler dispatch, feature handlers, post-processors, stores.

Invariants:
    - Handlers registered in explicit tuples (no auto-discovery)
    - parse_input never performs IO; execute owns every side effect

Design Decisions:
    - One handler file per feature for locality
"""
