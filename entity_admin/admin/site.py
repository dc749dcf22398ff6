"""Admin Site: registry of all sections plus the value-cleaning hook.

Invariants:
    - Section names are unique; sections listed in registration order
    - clean_values is the single place submitted values are cleaned

Design Decisions:
    - clean_values is async and overridable: a host site can subclass AdminSite
      to hash passwords or add cross-field checks before persistence
    - default_site singleton for hosts that register at import time
"""

import logging
from typing import Any, Mapping

from entity_admin.admin.section import AdminSection
from entity_admin.core.clean_values import clean_values
from entity_admin.core.domain_types import SectionName
from entity_admin.core.entity_metadata import EntityMetadata
from entity_admin.core.errors import SectionNotFoundError

logger = logging.getLogger(__name__)


class AdminSite:
    """Registry of admin sections."""

    def __init__(self):
        self._sections: dict[SectionName, AdminSection] = {}

    def register(self, section_name: SectionName, model: type) -> AdminSection:
        """Register a model under a section, creating the section on first use."""
        section = self._sections.get(section_name)
        if section is None:
            section = AdminSection(section_name)
            self._sections[section_name] = section
        section.register(model)
        return section

    def get_section(self, section_name: SectionName) -> AdminSection:
        section = self._sections.get(section_name)
        if section is None:
            raise SectionNotFoundError(section_name)
        return section

    def get_section_list(self) -> list[AdminSection]:
        return list(self._sections.values())

    async def clean_values(
        self, values: Mapping[str, Any], metadata: EntityMetadata, partial: bool = False,
    ) -> dict[str, Any]:
        """Clean raw submitted values. Raises ValueCleaningError.

        partial=True is passed for updates: missing columns keep their stored value.
        """
        return clean_values(values, metadata, partial=partial)


default_site = AdminSite()
