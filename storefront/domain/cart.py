# storefront/domain/cart.py
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, TypeAdapter, ValidationError as PydanticValidationError

from storefront.domain.errors import StockExceeded, ValidationError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartLine(BaseModel):
    """Product snapshot taken when the line was last touched, plus the requested quantity."""

    product_id: int
    name: str
    unit_price: Decimal
    stock: int = Field(..., ge=0)
    image_url: str | None = None
    quantity: int = Field(..., ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


_lines_adapter = TypeAdapter(List[CartLine])


class Cart:
    """
    Client-held cart, one per browsing session.
    Lines are ordered and keyed by product id (adding the same product merges).
    Stock is checked against the snapshot only; the real check happens at settlement.
    """

    def __init__(self, lines: List[CartLine] | None = None):
        self.lines: List[CartLine] = list(lines or [])

    def __len__(self):
        return len(self.lines)

    def __bool__(self):
        return bool(self.lines)

    def __eq__(self, other):
        return isinstance(other, Cart) and self.lines == other.lines

    def find(self, product_id: int) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add_line(self, product, quantity: int = 1) -> CartLine:
        """
        Adds `quantity` of `product` (anything with id, name, price,
        stock_quantity and image_url). Raises StockExceeded and leaves the
        cart untouched when the merged quantity would go above the product's stock.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        available = int(product.stock_quantity)
        existing = self.find(product.id)
        new_quantity = (existing.quantity if existing else 0) + quantity

        if new_quantity > available:
            raise StockExceeded(product.id, new_quantity, available)

        line = CartLine(
            product_id=product.id,
            name=product.name,
            unit_price=Decimal(str(product.price)),
            stock=available,
            image_url=product.image_url,
            quantity=new_quantity,
        )

        if existing:
            # refresh snapshot, keep position
            self.lines[self.lines.index(existing)] = line
        else:
            self.lines.append(line)
        return line

    def remove_line(self, index: int) -> CartLine | None:
        # out of range (negative too) is a no-op
        if index < 0 or index >= len(self.lines):
            return None
        return self.lines.pop(index)

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))

    def discard(self, purchased: List[CartLine]):
        """Takes bought quantities out; anything added or raised since stays."""
        for bought in purchased:
            line = self.find(bought.product_id)
            if line is None:
                continue
            index = self.lines.index(line)
            left = line.quantity - bought.quantity
            if left < 1:
                self.lines.pop(index)
            else:
                self.lines[index] = line.model_copy(update={"quantity": left})

    def clear(self):
        self.lines = []

    def dumps(self) -> str:
        return _lines_adapter.dump_json(self.lines).decode()

    @classmethod
    def loads(cls, raw: str | bytes | None) -> "Cart":
        if not raw:
            return cls()
        try:
            return cls(_lines_adapter.validate_json(raw))
        except PydanticValidationError as e:
            logger.warning(f"Stored cart could not be read, starting empty: {e.error_count()} errors")
            return cls()
