# storefront/stores/persistence.py
"""
Load/save boundary between the in-memory stores and durable storage.

Every store is saved under a fixed key as a JSON envelope:

    {"version": 1, "state": {...}}

An entry whose version does not match, that is not valid JSON, or whose
state fails schema validation is discarded and the store starts from its
defaults.
"""
import json
import logging
from typing import Protocol, TypeVar

from pydantic import ValidationError
from sqlmodel import Session, SQLModel

from storefront.repositories.storage_repo import StorageRepository

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=SQLModel)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class ClientStorage:
    """
    Durable storage for one browser, backed by the client_storage table.
    """

    def __init__(self, session: Session, client_id: str, repo: StorageRepository | None = None):
        self.session = session
        self.client_id = client_id
        self.repo = repo or StorageRepository()

    def get_item(self, key: str) -> str | None:
        entry = self.repo.get(self.session, self.client_id, key)
        return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        self.repo.put(self.session, self.client_id, key, value)

    def remove_item(self, key: str) -> None:
        self.repo.delete(self.session, self.client_id, key)


def load_state(
    storage: KeyValueStorage,
    key: str,
    model: type[StateT],
    version: int,
) -> StateT:
    """
    Rehydrate a store slice.

    Returns a fresh default instance of `model` when nothing usable is
    stored under `key`.
    """
    raw = storage.get_item(key)
    if raw is None:
        return model()

    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable %s entry", key)
        return model()

    if not isinstance(envelope, dict) or envelope.get("version") != version:
        found = envelope.get("version") if isinstance(envelope, dict) else None
        logger.warning("Discarding %s entry with version %r (expected %d)", key, found, version)
        return model()

    try:
        return model.model_validate(envelope.get("state") or {})
    except ValidationError as e:
        logger.warning("Discarding invalid %s entry: %s", key, e.error_count())
        return model()


def save_state(storage: KeyValueStorage, key: str, state: SQLModel, version: int) -> None:
    """Write a store slice under its key, stamped with the schema version."""
    envelope = {"version": version, "state": state.model_dump(mode="json")}
    storage.set_item(key, json.dumps(envelope))
