from __future__ import annotations

from datetime import date
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field

from steelops.errors import CheckoutError
from .catalog import Product


class CartItem(BaseModel):
    """One cart line. Lives only in the browser session until checkout."""
    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(gt=0)
    unit: str = "tons"
    specifications: str = ""
    delivery_date: Optional[date] = None

    @property
    def key(self) -> Tuple[str, str, Optional[date]]:
        return (self.product_id, self.specifications, self.delivery_date)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_product(
        cls,
        product: Product,
        quantity: int,
        specifications: str = "",
        delivery_date: Optional[date] = None,
    ) -> "CartItem":
        if quantity <= 0:
            raise CheckoutError("Quantity must be greater than 0")
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            specifications=(specifications or "").strip(),
            delivery_date=delivery_date,
        )


class Cart:
    """In-memory cart. Lines with the same product, specifications and delivery date merge."""

    def __init__(self, items: Optional[List[CartItem]] = None) -> None:
        self._items: List[CartItem] = []
        for item in items or []:
            self.add(item)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> CartItem:
        return self._items[index]

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def add(self, item: CartItem) -> None:
        for i, existing in enumerate(self._items):
            if existing.key == item.key:
                self._items[i] = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
                return
        self._items.append(item)

    def update_quantity(self, index: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove(index)
            return
        self._items[index] = self._items[index].model_copy(update={"quantity": quantity})

    def remove(self, index: int) -> None:
        del self._items[index]

    def replace(self, item: CartItem) -> None:
        self._items = [item]

    def clear(self) -> None:
        self._items = []

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self._items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)
