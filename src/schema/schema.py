"""
Centralized JSON Schema Loading and Payload Validation.

This module is responsible for loading the JSON schema files that gate every
mutating request and for validating inbound payloads against them.

Design Principles:
    1. Load Once: Schemas are loaded at module import time, not on every use
    2. Fail Fast: Missing or invalid schemas cause immediate import failure
    3. Pure Validation: validate_payload() holds no state between calls and
       returns a result object instead of raising

File Location:
    Schemas are expected to be in the same directory as this module
    (src/schema/). The path is resolved using __file__ to ensure
    it works regardless of the current working directory.

Error Handling:
    - FileNotFoundError: Schema file doesn't exist at expected path
    - json.JSONDecodeError: Schema file contains invalid JSON syntax
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

SCHEMA_DIR = Path(__file__).parent


def _load_schema(schema_filename: str) -> Dict[str, Any]:
    """
    Load a JSON schema file from the schema directory.

    Args:
        schema_filename: Name of the JSON schema file (e.g., "post_schema.json")

    Returns:
        Parsed JSON schema as a dictionary, ready for use with jsonschema library

    Raises:
        FileNotFoundError: If the schema file doesn't exist at the expected location.
        json.JSONDecodeError: If the schema file exists but contains invalid JSON.
    """
    schema_path = SCHEMA_DIR / schema_filename

    if not schema_path.exists():
        raise FileNotFoundError(
            f"Schema file not found: {schema_path}\n"
            f"Expected location: {SCHEMA_DIR}"
        )

    with open(schema_path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"Invalid JSON in schema file {schema_filename}: {e.msg}",
                e.doc,
                e.pos
            )


POST_SCHEMA: Dict[str, Any] = _load_schema("post_schema.json")
VALIDATION_REQUEST_SCHEMA: Dict[str, Any] = _load_schema("validation_request_schema.json")
ORGANIZATION_SCHEMA: Dict[str, Any] = _load_schema("organization_schema.json")

# Fail at import time if a schema document is itself malformed
Draft7Validator.check_schema(POST_SCHEMA)
Draft7Validator.check_schema(VALIDATION_REQUEST_SCHEMA)
Draft7Validator.check_schema(ORGANIZATION_SCHEMA)


def get_post_schema() -> Dict[str, Any]:
    """Get the post payload JSON schema (same object as POST_SCHEMA)."""
    return POST_SCHEMA


def get_validation_request_schema() -> Dict[str, Any]:
    """Get the validation request JSON schema (same object as VALIDATION_REQUEST_SCHEMA)."""
    return VALIDATION_REQUEST_SCHEMA


class ValidationResult:
    """Outcome of validating one payload against one schema.

    Attributes:
        ok: True when the payload satisfied the schema
        data: The payload reduced to the schema's declared properties
            (None when validation failed)
        errors: Field-level violations, each a dict with
            "path" (list of keys), "message" and "code" (the failing
            JSON Schema keyword, e.g. "minLength")
    """

    def __init__(self, ok: bool, data: Optional[Dict[str, Any]] = None,
                 errors: Optional[List[Dict[str, Any]]] = None):
        self.ok = ok
        self.data = data
        self.errors = errors or []

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        return f"ValidationResult(ok={self.ok!r}, data={self.data!r}, errors={self.errors!r})"


def validate_payload(payload: Any, schema: Dict[str, Any]) -> ValidationResult:
    """Validate a payload against a JSON schema without raising.

    Every violation is collected (not only the first one) and sorted by the
    path of the failing field so responses are stable between calls.

    Args:
        payload: Parsed JSON body (may be any JSON value, or None)
        schema: One of the schemas loaded by this module

    Returns:
        ValidationResult with either the stripped data or the error list

    Example:
        >>> result = validate_payload({"id": "abc", "salt": "123"}, VALIDATION_REQUEST_SCHEMA)
        >>> result.ok
        False
        >>> result.errors[0]["path"], result.errors[0]["code"]
        (['salt'], 'minLength')
    """
    validator = Draft7Validator(schema)
    violations = sorted(
        validator.iter_errors(payload),
        key=lambda e: [str(p) for p in e.absolute_path]
    )

    if violations:
        errors = [
            {
                "path": list(e.absolute_path),
                "message": e.message,
                "code": e.validator,
            }
            for e in violations
        ]
        return ValidationResult(False, errors=errors)

    # Unknown properties that the schema tolerates are dropped here
    properties = schema.get("properties", {})
    data = {key: payload[key] for key in properties if key in payload}
    return ValidationResult(True, data=data)
