# storefront/stores/cart.py
from storefront.constants import CART_STORAGE_KEY, DELIVERY_TIERS
from storefront.schemas.cart import CartLine, CartLineRead, CartState, CartSummary, DeliveryChoice
from storefront.stores.persistence import KeyValueStorage, load_state, save_state

CART_STATE_VERSION = 1


def compute_totals(lines: list[CartLine], delivery: DeliveryChoice | None) -> tuple[float, float]:
    """Return (subtotal, total). total = subtotal + delivery flat fee."""
    subtotal = sum(line.unit_price * line.quantity for line in lines)
    delivery_fee = delivery.flat_fee if delivery else 0.0
    return subtotal, subtotal + delivery_fee


class CartStore:
    """
    Explicit cart state container.

    Contract:
      - lines are unique by product_id; add_item merges by summing quantity
      - update_quantity with quantity <= 0 is remove_item
      - clear_cart resets lines, delivery and guest contact together
      - every mutation recomputes subtotal/total and saves immediately
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.state = load_state(storage, CART_STORAGE_KEY, CartState, CART_STATE_VERSION)
        # stored totals are never trusted over their inputs
        self._recompute()

    # ---- internal helpers ----

    def _recompute(self) -> None:
        self.state.subtotal, self.state.total = compute_totals(self.state.lines, self.state.delivery)

    def _commit(self) -> None:
        self._recompute()
        save_state(self.storage, CART_STORAGE_KEY, self.state, CART_STATE_VERSION)

    def _find(self, product_id: int) -> CartLine | None:
        for line in self.state.lines:
            if line.product_id == product_id:
                return line
        return None

    # ---- read ----

    @property
    def lines(self) -> list[CartLine]:
        return list(self.state.lines)

    @property
    def delivery(self) -> DeliveryChoice | None:
        return self.state.delivery

    @property
    def subtotal(self) -> float:
        return self.state.subtotal

    @property
    def total(self) -> float:
        return self.state.total

    def count(self) -> int:
        return sum(line.quantity for line in self.state.lines)

    def is_empty(self) -> bool:
        return not self.state.lines

    def summary(self) -> CartSummary:
        items = [
            CartLineRead(**line.model_dump(), line_total=line.unit_price * line.quantity)
            for line in self.state.lines
        ]
        return CartSummary(
            items=items,
            item_count=self.count(),
            subtotal=self.state.subtotal,
            delivery=self.state.delivery,
            delivery_fee=self.state.delivery.flat_fee if self.state.delivery else 0.0,
            total=self.state.total,
            guest_email=self.state.guest_email,
            guest_phone=self.state.guest_phone,
        )

    # ---- mutations ----

    def add_item(self, line: CartLine) -> None:
        if line.quantity <= 0:
            raise ValueError("quantity must be >= 1")

        existing = self._find(line.product_id)
        if existing:
            existing.quantity += line.quantity
        else:
            self.state.lines.append(line.model_copy())
        self._commit()

    def remove_item(self, product_id: int) -> None:
        self.state.lines = [line for line in self.state.lines if line.product_id != product_id]
        self._commit()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return

        line = self._find(product_id)
        if line:
            line.quantity = quantity
        self._commit()

    def clear_cart(self) -> None:
        self.state.lines = []
        self.state.delivery = None
        self.state.guest_email = None
        self.state.guest_phone = None
        self._commit()

    def set_delivery(self, tier: str) -> None:
        info = DELIVERY_TIERS.get(tier)
        if info is None:
            raise ValueError(f"unknown delivery tier: {tier}")
        self.state.delivery = DeliveryChoice(tier=tier, flat_fee=info["fee"])
        self._commit()

    def set_guest_info(self, email: str, phone: str) -> None:
        self.state.guest_email = email
        self.state.guest_phone = phone
        self._commit()
