"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Tokenizing and command parsing are synchronous and deterministic

Design Decisions:
    - Functional core separated from imperative shell: the shell fetches the
      owner's notification rows, core computes the new list, the shell writes it
"""
