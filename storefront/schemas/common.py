# storefront/schemas/common.py
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, model_validator

T = TypeVar("T")

OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["unpaid", "pending", "paid", "failed", "refunded"]
DeliveryTier = Literal["economy", "standard", "express"]
Locale = Literal["en", "sw"]


class Page(BaseModel, Generic[T]):
    """
    Paginated list as returned by the API:
      {count, next, previous, results}

    Some endpoints answer with a bare list; that is wrapped into a
    single page so callers only ever see one shape.
    """

    count: int = 0
    next: str | None = None
    previous: str | None = None
    results: list[T] = []

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"count": len(data), "results": data}
        if isinstance(data, dict) and "count" not in data and "results" in data:
            return {**data, "count": len(data["results"] or [])}
        return data

    @property
    def has_more(self) -> bool:
        return bool(self.next)
