"""API Layer: FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Admin views return rendered HTML; health probes return JSON

Design Decisions:
    - Thin routes delegate to the site, sections and repositories
"""
