"""Contract schemas for the users document, audit artifacts and API bodies.

Every specs/*.schema.json must be a self-consistent Draft 2020-12 schema,
and the record/response schemas must agree with the onboarding code.
"""

import json
from pathlib import Path

import pytest
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from onboard.errors import OnboardErrorCode

SPECS_DIR = Path(__file__).parent.parent / "specs"
DRAFT_2020_12 = "https://json-schema.org/draft/2020-12/schema"
CONTRACT_SCHEMAS = (
    "onboarded_users_audit.schema.json",
    "upload_response.schema.json",
    "user_record.schema.json",
    "users_document.schema.json",
)


def load_schema(name: str) -> dict:
    return json.loads((SPECS_DIR / name).read_text(encoding="utf-8"))


def test_every_contract_schema_is_shipped() -> None:
    shipped = {p.name for p in SPECS_DIR.glob("*.schema.json")}
    assert shipped >= set(CONTRACT_SCHEMAS)


@pytest.mark.parametrize("name", sorted(p.name for p in SPECS_DIR.glob("*.schema.json")))
def test_schema_is_valid_draft202012(name: str) -> None:
    schema = load_schema(name)

    assert schema.get("$schema") == DRAFT_2020_12, f"{name}: wrong or missing $schema"
    assert schema.get("$id") == name, f"{name}: $id should match the file name"
    assert validator_for(schema) is Draft202012Validator

    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as e:
        pytest.fail(f"{name}: {e.message}")


@pytest.mark.parametrize(
    "record",
    [
        {"Employee Id": "HAYHAH1234", "First Name": "Jane", "Last Name": "Doe", "Email Address": "jane.doe@yopmail.com"},
        {"Email Address": "only.email@yopmail.com", "First Name": None},
    ],
)
def test_user_record_accepts_uploaded_rows(record: dict) -> None:
    Draft202012Validator(load_schema("user_record.schema.json")).validate(record)


@pytest.mark.parametrize(
    "record",
    [
        {"First Name": "Jane"},
        {"Email Address": ""},
        {"Email Address": "jane.doe@yopmail.com", "Employee Id": 1234},
    ],
)
def test_user_record_rejects_invalid_rows(record: dict) -> None:
    validator = Draft202012Validator(load_schema("user_record.schema.json"))
    assert not validator.is_valid(record)


def test_upload_response_error_codes_exclude_conflict() -> None:
    """Conflicts use the duplicates shape, never the error_code shape."""
    validator = Draft202012Validator(load_schema("upload_response.schema.json"))
    body = {"status": "error", "error_code": "DUPLICATE_EMAIL", "error_message": "dup"}
    assert not validator.is_valid(body)


def test_upload_response_error_codes_match_error_taxonomy() -> None:
    schema = load_schema("upload_response.schema.json")
    (error_branch,) = [b for b in schema["oneOf"] if "error_code" in b["properties"]]
    assert set(error_branch["properties"]["error_code"]["enum"]) == set(OnboardErrorCode)
