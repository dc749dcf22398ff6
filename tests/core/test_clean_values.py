"""Value cleaning: typed coercion, checkbox semantics, empty values and error collection.

Invariants:
    - Unknown keys and generated primary keys are dropped
    - Booleans and many-to-many relations treat absence as False / []
    - Every invalid field is reported at once
"""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from entity_admin.core.clean_values import clean_values, coerce_primary_key
from entity_admin.core.domain_types import ColumnKind, RelationKind
from entity_admin.core.entity_metadata import ColumnInfo, EntityMetadata, RelationInfo
from entity_admin.core.errors import EntityNotFoundError, ValueCleaningError


class Status(enum.Enum):
    DRAFT = "d"
    LIVE = "l"


ARTICLE = EntityMetadata(
    name="Article",
    table_name="articles",
    columns=(
        ColumnInfo("id", ColumnKind.INTEGER, nullable=False, primary_key=True, generated=True),
        ColumnInfo("title", ColumnKind.STRING, nullable=False, length=20),
        ColumnInfo("body", ColumnKind.TEXT, nullable=True),
        ColumnInfo("views", ColumnKind.INTEGER, nullable=False, has_default=True),
        ColumnInfo("rating", ColumnKind.DECIMAL, nullable=True),
        ColumnInfo("score", ColumnKind.FLOAT, nullable=False),
        ColumnInfo("published", ColumnKind.BOOLEAN, nullable=False, has_default=True),
        ColumnInfo("published_on", ColumnKind.DATE, nullable=True),
        ColumnInfo("updated_at", ColumnKind.DATETIME, nullable=True),
        ColumnInfo("token", ColumnKind.UUID, nullable=True),
        ColumnInfo("extra", ColumnKind.JSON, nullable=True),
        ColumnInfo(
            "status", ColumnKind.ENUM, nullable=False,
            choices=("DRAFT", "LIVE"), enum_class=Status,
        ),
        ColumnInfo("author_id", ColumnKind.INTEGER, nullable=True, foreign_key_target="Author"),
    ),
    relations=(
        RelationInfo("author", RelationKind.MANY_TO_ONE, "Author"),
        RelationInfo("tags", RelationKind.MANY_TO_MANY, "Tag"),
    ),
)

COUNTRY = EntityMetadata(
    name="Country",
    table_name="countries",
    columns=(
        ColumnInfo("code", ColumnKind.STRING, nullable=False, primary_key=True, length=2),
        ColumnInfo("name", ColumnKind.STRING, nullable=False),
    ),
)

VALID = {"title": "Hello", "score": "1.5", "status": "DRAFT"}


def _clean(**overrides):
    return clean_values({**VALID, **overrides}, ARTICLE)


def test_valid_values_are_coerced():
    cleaned = _clean(
        views="3", rating="4.50", published_on="2024-02-29",
        updated_at="2024-02-29T10:30", token="12345678-1234-5678-1234-567812345678",
        extra='{"a": [1, 2]}', author_id="9",
    )
    assert cleaned["title"] == "Hello"
    assert cleaned["views"] == 3
    assert cleaned["rating"] == Decimal("4.50")
    assert cleaned["score"] == 1.5
    assert cleaned["published_on"] == date(2024, 2, 29)
    assert cleaned["updated_at"] == datetime(2024, 2, 29, 10, 30)
    assert cleaned["token"] == uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert cleaned["extra"] == {"a": [1, 2]}
    assert cleaned["status"] is Status.DRAFT
    assert cleaned["author_id"] == 9


def test_unknown_keys_and_generated_primary_key_are_dropped():
    cleaned = _clean(id="99", csrf="abc", author="Someone")
    assert "id" not in cleaned
    assert "csrf" not in cleaned
    assert "author" not in cleaned


@pytest.mark.parametrize("raw", ["on", "true", "1", "YES", "True"])
def test_checkbox_truthy_values(raw):
    assert _clean(published=raw)["published"] is True


@pytest.mark.parametrize("raw", ["off", "false", "0", ""])
def test_checkbox_other_values_are_false(raw):
    assert _clean(published=raw)["published"] is False


def test_missing_checkbox_is_false():
    assert _clean()["published"] is False


def test_empty_string_on_nullable_column_is_none():
    cleaned = _clean(body="", rating="", author_id="")
    assert cleaned["body"] is None
    assert cleaned["rating"] is None
    assert cleaned["author_id"] is None


def test_empty_string_on_defaulted_column_is_omitted():
    assert "views" not in _clean(views="")


def test_empty_string_on_required_string_is_kept():
    assert _clean(title="")["title"] == ""


def test_empty_string_on_required_non_string_is_an_error():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(score="")
    assert exc_info.value.field_errors == {"score": "This field is required."}


def test_partial_leaves_missing_keys_out():
    cleaned = clean_values({"status": "LIVE"}, ARTICLE, partial=True)
    assert set(cleaned) == {"status", "published", "tags"}


def test_missing_required_columns_are_errors():
    with pytest.raises(ValueCleaningError) as exc_info:
        clean_values({"status": "LIVE"}, ARTICLE)
    assert exc_info.value.field_errors == {
        "title": "This field is required.",
        "score": "This field is required.",
    }


def test_missing_nullable_and_defaulted_columns_are_left_out():
    cleaned = clean_values(VALID, ARTICLE)
    assert "body" not in cleaned
    assert "views" not in cleaned


@pytest.mark.parametrize("raw", [{"name": "Peru"}, {"code": "", "name": "Peru"}])
def test_entered_primary_key_is_required(raw):
    with pytest.raises(ValueCleaningError) as exc_info:
        clean_values(raw, COUNTRY)
    assert exc_info.value.field_errors == {"code": "This field is required."}


def test_invalid_values_are_all_reported():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(views="many", published_on="yesterday", extra="{not json", token="nope")
    errors = exc_info.value.field_errors
    assert set(errors) == {"views", "published_on", "extra", "token"}
    assert errors["views"] == "Enter a valid integer value."
    assert exc_info.value.http_status == 400


def test_enum_rejects_unknown_choice():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(status="ARCHIVED")
    assert "not one of the available choices" in exc_info.value.field_errors["status"]


def test_string_length_is_enforced():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(title="x" * 21)
    assert exc_info.value.field_errors["title"].startswith("Ensure this value has at most 20")


def test_many_to_many_ids_are_coerced():
    assert _clean(tags=["1", "", "3"])["tags"] == [1, 3]


def test_single_many_to_many_value_is_wrapped():
    assert _clean(tags="4")["tags"] == [4]


def test_missing_many_to_many_is_empty():
    assert _clean()["tags"] == []


def test_invalid_many_to_many_id_is_an_error():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(tags=["1", "x"])
    assert "tags" in exc_info.value.field_errors


def test_error_response_lists_field_details():
    with pytest.raises(ValueCleaningError) as exc_info:
        _clean(views="x")
    details = exc_info.value.to_response()["error"]["details"]
    assert details == [{"field": "views", "message": "Enter a valid integer value."}]


def test_coerce_primary_key_converts_to_column_type():
    assert coerce_primary_key("12", ARTICLE) == 12


def test_coerce_primary_key_failure_is_not_found():
    with pytest.raises(EntityNotFoundError) as exc_info:
        coerce_primary_key("abc", ARTICLE)
    assert exc_info.value.http_status == 404
