"""Site and section registry: registration, lookup and the cleaning hook."""

import pytest

from entity_admin.admin.metadata import metadata_for
from entity_admin.admin.repository import EntityRepository
from entity_admin.admin.site import AdminSite
from entity_admin.core.domain_types import EntityName, SectionName
from entity_admin.core.errors import (
    DuplicateRegistrationError, EntityNotRegisteredError, SectionNotFoundError,
)
from tests.models import Author, Book, Country, Tag


def test_register_creates_section_on_first_use():
    site = AdminSite()
    section = site.register("library", Author)
    assert section.name == "library"
    assert site.get_section("library") is section


def test_lookup_by_section_and_entity_name(site):
    section = site.get_section(SectionName("geo"))
    assert section.get_entity(EntityName("Country")) is Country
    assert section.get_metadata(EntityName("Country")).name == EntityName("Country")


def test_sections_listed_in_registration_order(site):
    assert [s.name for s in site.get_section_list()] == ["library", "geo", "access"]


def test_section_entities_in_registration_order(site):
    names = [m.name for m in site.get_section("library").entities]
    assert names == ["Author", "Book", "Tag"]


def test_unknown_section_raises_not_found(site):
    with pytest.raises(SectionNotFoundError) as exc_info:
        site.get_section("missing")
    assert exc_info.value.http_status == 404


def test_unknown_entity_raises_not_registered(site):
    section = site.get_section("geo")
    with pytest.raises(EntityNotRegisteredError) as exc_info:
        section.get_entity("Book")
    assert exc_info.value.context.section == "geo"


def test_duplicate_registration_is_rejected():
    site = AdminSite()
    site.register("library", Tag)
    with pytest.raises(DuplicateRegistrationError):
        site.register("library", Tag)


def test_same_model_in_two_sections_is_allowed():
    site = AdminSite()
    site.register("library", Tag)
    site.register("taxonomy", Tag)
    assert site.get_section("taxonomy").get_entity("Tag") is Tag


def test_get_repository_binds_model_and_metadata(site, test_db):
    repository = site.get_section("library").get_repository("Book", test_db)
    assert isinstance(repository, EntityRepository)
    assert repository.model is Book
    assert repository.metadata is metadata_for(Book)


async def test_clean_values_uses_core_cleaning(site):
    metadata = site.get_section("geo").get_metadata("Country")
    cleaned = await site.clean_values({"code": "DE", "name": "Germany", "x": "1"}, metadata)
    assert cleaned == {"code": "DE", "name": "Germany"}


async def test_clean_values_can_be_overridden():
    class UppercaseSite(AdminSite):
        async def clean_values(self, values, metadata, partial=False):
            cleaned = await super().clean_values(values, metadata, partial)
            cleaned["code"] = cleaned["code"].upper()
            return cleaned

    site = UppercaseSite()
    site.register("geo", Country)
    metadata = site.get_section("geo").get_metadata("Country")
    cleaned = await site.clean_values({"code": "it", "name": "Italy"}, metadata)
    assert cleaned["code"] == "IT"
