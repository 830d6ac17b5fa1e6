"""Route Modules - one file per inbound channel or resource.

Invariants:
    - Each module defines its own APIRouter
    - Routes never contain business logic (delegate to services)
"""
