"""Schemas: Pydantic models at the API boundary."""
