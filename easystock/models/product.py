"""Product and product cost models."""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from easystock.database import Base
from easystock.entities import Currency, Product, ProductCost
from easystock.models.types import Money


class ProductRecord(Base):
    """Product row, keyed by barcode."""

    __tablename__ = 'product'

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=0)
    profit_margin = Column(Money, nullable=False, default=0)
    price = Column(Money, nullable=False, default=0)

    # Cost lines are owned by the product and replaced wholesale on update
    costs = relationship(
        'ProductCostRecord',
        back_populates='product',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='ProductCostRecord.position',
    )

    def __repr__(self):
        return f"<ProductRecord(id='{self.id}', name='{self.name}', quantity={self.quantity})>"

    @classmethod
    def from_entity(cls, product: Product):
        record = cls(id=product.id)
        record.update_from(product)
        return record

    def update_from(self, product: Product):
        self.name = product.name
        self.quantity = product.quantity
        self.low_stock_threshold = product.low_stock_threshold
        self.profit_margin = product.profit_margin
        self.price = product.price
        self.costs = [
            ProductCostRecord.from_entity(cost, position)
            for position, cost in enumerate(product.costs)
        ]

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            quantity=self.quantity,
            low_stock_threshold=self.low_stock_threshold,
            profit_margin=self.profit_margin,
            price=self.price,
            costs=[cost.to_entity() for cost in self.costs],
        )


class ProductCostRecord(Base):
    """Landed-cost line of a product."""

    __tablename__ = 'product_cost'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    cost_id = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    currency = Column(String(8), nullable=False)

    product = relationship('ProductRecord', back_populates='costs')

    def __repr__(self):
        return f"<ProductCostRecord(product_id='{self.product_id}', title='{self.title}')>"

    @classmethod
    def from_entity(cls, cost: ProductCost, position: int = 0):
        return cls(
            cost_id=cost.id,
            position=position,
            title=cost.title,
            amount=cost.amount,
            currency=Currency(cost.currency).value,
        )

    def to_entity(self) -> ProductCost:
        return ProductCost(
            id=self.cost_id,
            title=self.title,
            amount=self.amount,
            currency=Currency(self.currency),
        )
