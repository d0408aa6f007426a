"""Schema Package - JSON Schema Loading and Validation.

This package provides centralized loading of the JSON schemas that gate
every mutating request, and a stateless validation function built on them.

Available Schemas:
    POST_SCHEMA: Body of POST /posts and PUT /posts/<id>
        title (1-100 chars) and content (1-1000 chars), nothing else.
    VALIDATION_REQUEST_SCHEMA: Body of POST/DELETE /api/<org>/req-validate
        id (non-empty, no ":") and salt (at least 6 chars).
    ORGANIZATION_SCHEMA: Path parameters of /api/<org>/req-validate
        org (non-empty, no ":").

Usage Patterns:
    from schema import POST_SCHEMA, validate_payload
    result = validate_payload(request_body, POST_SCHEMA)
    if not result.ok:
        return {"ok": False, "message": "Invalid input", "errors": result.errors}, 400
"""
from .schema import (
    ORGANIZATION_SCHEMA,
    POST_SCHEMA,
    VALIDATION_REQUEST_SCHEMA,
    ValidationResult,
    get_post_schema,
    get_validation_request_schema,
    validate_payload,
)

__all__ = [
    "ORGANIZATION_SCHEMA",
    "POST_SCHEMA",
    "VALIDATION_REQUEST_SCHEMA",
    "ValidationResult",
    "get_post_schema",
    "get_validation_request_schema",
    "validate_payload",
]
