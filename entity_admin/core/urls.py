"""Admin URLs: builds every admin link from section, entity metadata and entity.

Invariants:
    - All URLs start with the configured prefix (no trailing slash)
    - Primary keys are percent-quoted, so any key type is path-safe
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from entity_admin.core.entity_metadata import EntityMetadata

DEFAULT_PREFIX = "/admin"


@dataclass(frozen=True)
class AdminUrls:
    prefix: str = DEFAULT_PREFIX

    def __post_init__(self):
        stripped = self.prefix.strip("/")
        object.__setattr__(self, "prefix", f"/{stripped}" if stripped else "")

    def index(self) -> str:
        return self.prefix or "/"

    def change_list(self, section_name: str, metadata: EntityMetadata, page: int | None = None) -> str:
        url = f"{self.prefix}/{quote(section_name, safe='')}/{quote(metadata.name, safe='')}"
        if page is not None and page > 1:
            url += f"?page={page}"
        return url

    def add(self, section_name: str, metadata: EntityMetadata) -> str:
        return f"{self.change_list(section_name, metadata)}/add"

    def change(self, section_name: str, metadata: EntityMetadata, entity: Any) -> str:
        return f"{self._entity_base(section_name, metadata, entity)}/change"

    def delete(self, section_name: str, metadata: EntityMetadata, entity: Any) -> str:
        return f"{self._entity_base(section_name, metadata, entity)}/delete"

    def _entity_base(self, section_name: str, metadata: EntityMetadata, entity: Any) -> str:
        primary_key = quote(str(metadata.primary_key_of(entity)), safe="")
        return f"{self.change_list(section_name, metadata)}/{primary_key}"
