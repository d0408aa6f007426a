"""
Validation Request Storage Operations.

This module implements the three operations behind /api/<org>/req-validate
on top of the key-value store collaborator:

    create(org, id, salt)       put one record under a fresh composite key
    latest(org)                 most recently captured record of the org
    delete_matching(org, id)    delete every record of (org, id)

Key Layout:
    <organization>:<id>:<timestamp>

    The timestamp is fixed-width ISO-8601 in UTC with millisecond precision
    (e.g. 2024-01-15T10:00:00.000Z), so comparing timestamps as strings
    compares capture times.

Record Layout (JSON value):
    {"organization": "...", "id": "...", "salt": "...", "timestamp": "..."}

Ordering:
    latest() does not trust the order of the listing. Within an organization
    the listing is sorted by id first, so the record with the greatest
    embedded timestamp is picked explicitly.

Concurrency:
    delete_matching() submits one delete per key to a thread pool. There is
    no rollback: if one delete fails the others may already have succeeded.
"""
import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from storage import KeyValueStore

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"

# Upper bound on concurrent deletes issued for one request
MAX_DELETE_WORKERS = 10


class ValidationRequestNotFound(Exception):
    """Raised when no stored validation request matches a lookup.

    Attributes:
        organization: Organization taken from the request path
        request_id: Validation request id, when the lookup was per id
    """

    def __init__(self, organization: str, request_id: Optional[str] = None, message: Optional[str] = None):
        self.organization = organization
        self.request_id = request_id
        if message is None:
            if request_id is None:
                message = f"No validation requests found for organization '{organization}'"
            else:
                message = (
                    f"No validation requests found for id '{request_id}' "
                    f"in organization '{organization}'"
                )
        super().__init__(message)


def utc_timestamp() -> str:
    """Current UTC time as fixed-width ISO-8601, e.g. 2024-01-15T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def organization_prefix(organization: str) -> str:
    return f"{organization}{KEY_DELIMITER}"


def request_prefix(organization: str, request_id: str) -> str:
    return f"{organization}{KEY_DELIMITER}{request_id}{KEY_DELIMITER}"


def build_key(organization: str, request_id: str, timestamp: str) -> str:
    """Compose the storage key for one validation request record."""
    return f"{request_prefix(organization, request_id)}{timestamp}"


def key_timestamp(key: str) -> str:
    """Return the timestamp suffix of a composite key."""
    # Timestamps contain ":" themselves, so the suffix is located by its fixed
    # width rather than by splitting on the delimiter.
    return key[-len("0000-00-00T00:00:00.000Z"):]


class ValidationRequestService:
    """Validation request operations over a KeyValueStore.

    Args:
        store: Key-value store collaborator
        clock: Callable returning the capture timestamp string
            (defaults to utc_timestamp; injectable for tests)
        max_delete_workers: Thread pool size cap for delete_matching()

    Example:
        >>> service = ValidationRequestService(InMemoryKeyValueStore())
        >>> service.create("acme", "user-1", "s3cr3t-salt")["id"]
        'user-1'
        >>> service.latest("acme")["salt"]
        's3cr3t-salt'
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], str] = utc_timestamp,
                 max_delete_workers: int = MAX_DELETE_WORKERS):
        self.store = store
        self.clock = clock
        self.max_delete_workers = max_delete_workers

    def create(self, organization: str, request_id: str, salt: str) -> Dict[str, Any]:
        """Store a new validation request record and return it.

        Raises:
            StorageError: If the store rejects the write
        """
        timestamp = self.clock()
        key = build_key(organization, request_id, timestamp)
        record = {
            "organization": organization,
            "id": request_id,
            "salt": salt,
            "timestamp": timestamp,
        }
        self.store.put(key, json.dumps(record))
        logger.info(f"Stored validation request: org={organization}, id={request_id}, key={key}")
        return record

    def latest(self, organization: str) -> Dict[str, Any]:
        """Return the most recently captured record of an organization.

        Raises:
            ValidationRequestNotFound: If the organization has no keys, or the
                selected key has no value or an unparsable one
            StorageError: If listing or reading fails
        """
        keys = self.store.list(organization_prefix(organization))
        if not keys:
            raise ValidationRequestNotFound(organization)

        latest_key = max(keys, key=lambda k: (key_timestamp(k), k))
        logger.debug(f"Latest of {len(keys)} validation request key(s) for org={organization}: {latest_key}")

        raw = self.store.get(latest_key)
        if raw is None:
            logger.warning(f"Validation request key {latest_key} listed but has no value")
            raise ValidationRequestNotFound(organization)

        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid validation request JSON under {latest_key}: {e}")
            raise ValidationRequestNotFound(organization) from e

        if not isinstance(record, dict) or "id" not in record or "salt" not in record:
            logger.warning(f"Validation request under {latest_key} is missing id or salt")
            raise ValidationRequestNotFound(organization)

        return record

    def delete_matching(self, organization: str, request_id: str) -> List[str]:
        """Delete every record stored for (organization, request_id).

        Returns:
            The keys that were deleted

        Raises:
            ValidationRequestNotFound: If no key matches
            StorageError: If listing fails, or any delete fails (after all
                submitted deletes have finished)
        """
        keys = self.store.list(request_prefix(organization, request_id))
        if not keys:
            raise ValidationRequestNotFound(organization, request_id)

        failures = []
        workers = max(1, min(len(keys), self.max_delete_workers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.store.delete, key): key for key in keys}
            for future in as_completed(futures):
                key = futures[future]
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Failed to delete validation request key {key}: {e}")
                    failures.append(e)

        if failures:
            logger.error(
                f"Deleted {len(keys) - len(failures)} of {len(keys)} validation request(s) "
                f"for org={organization}, id={request_id}"
            )
            raise failures[0]

        logger.info(f"Deleted {len(keys)} validation request(s) for org={organization}, id={request_id}")
        return keys
