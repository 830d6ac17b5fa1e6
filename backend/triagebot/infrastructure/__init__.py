"""Infrastructure Layer - external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic other than errors and types
    - All external calls wrapped with retry/timeout/error mapping
"""
