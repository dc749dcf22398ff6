"""Admin Registry: site, sections, metadata extraction and repositories.

Invariants:
    - Only this package touches SQLAlchemy mappers and sessions on behalf of routes
"""
