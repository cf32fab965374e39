"""Client-held cart and its checkout-time revalidation.

The server never stores carts. Clients send their lines back and
``revalidate_cart`` prices them against the live catalogue, reporting lines
that can no longer be bought.
"""

from dataclasses import dataclass, field
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.catalog import get_price_snapshot
from storefront.shared.money import to_money


class CartIssueReason(Enum):
    UNAVAILABLE = "unavailable"
    INSUFFICIENT_STOCK = "insufficient_stock"


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    name: str
    sku: str
    price: float
    image: str | None
    quantity: int

    @property
    def subtotal(self) -> float:
        return to_money(self.price * self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "image": self.image,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


@dataclass(frozen=True)
class CartIssue:
    product_id: str
    reason: str
    requested: int
    available: int | None = None


@dataclass
class CartValidation:
    lines: list[PricedLine] = field(default_factory=list)
    issues: list[CartIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return bool(self.lines) and not self.issues

    @property
    def subtotal(self) -> float:
        return to_money(sum(line.subtotal for line in self.lines))


def _line_value(raw, name):
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    @classmethod
    def from_lines(cls, raw_lines):
        """Build a cart from ``{product_id, quantity}`` lines.

        Lines for the same product are merged, keeping first-seen order.
        """
        quantities = {}
        for raw in raw_lines or []:
            product_id = _line_value(raw, "product_id")
            quantity = _line_value(raw, "quantity")
            if not product_id:
                raise ValidationError({"items": ["Every cart line needs a product_id"]})
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise ValidationError({"items": [f"Quantity for product {product_id} must be at least 1"]})
            quantities[str(product_id)] = quantities.get(str(product_id), 0) + quantity

        return cls(lines=[CartLine(product_id=pid, quantity=qty) for pid, qty in quantities.items()])

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


def revalidate_cart(cart: Cart) -> CartValidation:
    result = CartValidation()
    for line in cart.lines:
        try:
            snapshot = get_price_snapshot(line.product_id)
        except ObjectNotFoundError:
            result.issues.append(
                CartIssue(
                    product_id=line.product_id,
                    reason=CartIssueReason.UNAVAILABLE.value,
                    requested=line.quantity,
                )
            )
            continue

        if snapshot.stock < line.quantity:
            result.issues.append(
                CartIssue(
                    product_id=line.product_id,
                    reason=CartIssueReason.INSUFFICIENT_STOCK.value,
                    requested=line.quantity,
                    available=snapshot.stock,
                )
            )

        result.lines.append(
            PricedLine(
                product_id=snapshot.product_id,
                name=snapshot.name,
                sku=snapshot.sku,
                price=snapshot.price,
                image=snapshot.image,
                quantity=line.quantity,
            )
        )
    return result
