"""Route Modules: one file per concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes never contain cleaning or persistence logic (delegate to admin/ and core/)
"""
