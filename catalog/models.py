# catalog/models.py
from pydantic import BaseModel, Field
from typing import List, Optional

from .errors import InsufficientStock


class Product(BaseModel):
    id: int
    name: str
    price: float
    quantity: int
    category: str

    def update_price(self, new_price: float) -> None:
        # no validation, negative prices are accepted
        self.price = new_price

    def sell(self, quantity: int) -> None:
        """Reduce stock by ``quantity``; raises InsufficientStock and leaves
        the product untouched when there is not enough of it."""
        if self.quantity < quantity:
            raise InsufficientStock(product_id=self.id)
        self.quantity -= quantity

    def restock(self, quantity: int) -> None:
        self.quantity += quantity

    def display(self) -> str:
        return (
            f"ID: {self.id}, Name: {self.name}, Price: {self.price:.2f}, "
            f"Quantity: {self.quantity}, Category: {self.category}"
        )


# ---------------------------
# Request / event schemas
# ---------------------------
class ProductIn(BaseModel):
    name: str
    price: float
    quantity: int
    category: Optional[str] = "general"


class QuantityIn(BaseModel):
    quantity: int


class PriceIn(BaseModel):
    price: float


class FetchRequest(BaseModel):
    ids: List[int] = Field(default_factory=list)


class ChangeEvent(BaseModel):
    order_id: int
    product_id: int
    quantity: int
    status: str


def _make_product(product_id: int, p: ProductIn) -> Product:
    return Product(
        id=product_id,
        name=p.name,
        price=p.price,
        quantity=p.quantity,
        category=p.category or "general",
    )
