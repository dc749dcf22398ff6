"""Admin Schemas: path parameters resolved by the admin views.

Invariants:
    - entity_name requires section_name; primary_key requires entity_name
    - Names are non-empty path segments
"""

from pydantic import BaseModel, Field, model_validator


class AdminModelsQuery(BaseModel):
    """(section, entity, primary key) triple, each optional from the right."""
    section_name: str | None = Field(None, min_length=1)
    entity_name: str | None = Field(None, min_length=1)
    primary_key: str | None = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_hierarchy(self):
        if self.entity_name and not self.section_name:
            raise ValueError("entity_name requires section_name")
        if self.primary_key and not self.entity_name:
            raise ValueError("primary_key requires entity_name")
        return self
