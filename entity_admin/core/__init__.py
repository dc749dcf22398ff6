"""Core Layer: pure admin logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from admin/, api/, infrastructure/, or db/
    - Functions operate on EntityMetadata, never on ORM mappers

Design Decisions:
    - Functional core separated from the imperative shell (repository, routes)
"""
