# storefront/models/storage.py
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class StorageEntry(SQLModel, table=True):
    """
    Durable key-value entry for one browser.

    This is the server-side counterpart of browser local storage:
      - client_id: value of the client cookie
      - key: fixed store name (e.g. "autoparts-cart")
      - value: JSON envelope {"version": N, "state": {...}}

    One client cannot have 2 rows for the same key.
    """

    __tablename__ = "client_storage"
    __table_args__ = (UniqueConstraint("client_id", "key"),)

    id: int | None = Field(default=None, primary_key=True)

    client_id: str = Field(
        index=True,
        max_length=64,
        description="Client cookie value",
    )

    key: str = Field(
        max_length=64,
        description="Store name",
    )

    value: str = Field(
        description="Serialized JSON envelope",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
