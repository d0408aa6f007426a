"""Validation Requests Package.

Organization-scoped validation request records kept in the key-value
store under time-ordered composite keys:

    <organization>:<id>:<ISO-8601 capture timestamp>

Exported:
    ValidationRequestService: create / latest / delete_matching
    ValidationRequestNotFound: raised when no record matches
    build_key, organization_prefix, request_prefix: key helpers
"""
from .service import (
    KEY_DELIMITER,
    ValidationRequestNotFound,
    ValidationRequestService,
    build_key,
    key_timestamp,
    organization_prefix,
    request_prefix,
    utc_timestamp,
)

__all__ = [
    "KEY_DELIMITER",
    "ValidationRequestNotFound",
    "ValidationRequestService",
    "build_key",
    "key_timestamp",
    "organization_prefix",
    "request_prefix",
    "utc_timestamp",
]
