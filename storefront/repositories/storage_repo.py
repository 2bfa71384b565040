# storefront/repositories/storage_repo.py
from datetime import datetime, timezone

from sqlmodel import Session, select

from storefront.models.storage import StorageEntry


class StorageRepository:
    """
    Data access layer for client storage entries.

    Responsibilities:
      - Pure DB operations (get / upsert / delete)
      - No FastAPI, no HTTP, no store semantics
    """

    def get(self, session: Session, client_id: str, key: str) -> StorageEntry | None:
        """Return the entry for (client, key), or None if never written."""
        stmt = select(StorageEntry).where(
            StorageEntry.client_id == client_id, StorageEntry.key == key
        )
        return session.exec(stmt).first()

    def put(self, session: Session, client_id: str, key: str, value: str) -> StorageEntry:
        """Insert or overwrite the entry for (client, key)."""
        entry = self.get(session, client_id, key)
        if entry is None:
            entry = StorageEntry(client_id=client_id, key=key, value=value)
        else:
            entry.value = value
            entry.updated_at = datetime.now(timezone.utc)
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    def delete(self, session: Session, client_id: str, key: str) -> None:
        entry = self.get(session, client_id, key)
        if entry is not None:
            session.delete(entry)
            session.commit()

    def list_keys(self, session: Session, client_id: str) -> list[str]:
        stmt = select(StorageEntry.key).where(StorageEntry.client_id == client_id)
        return list(session.exec(stmt).all())
