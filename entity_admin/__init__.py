"""Entity Admin: generic admin site for SQLAlchemy models on FastAPI.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Explicit imports only, no star exports
"""

__version__ = "0.1.0"
