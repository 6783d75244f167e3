"""Sale and sale line models."""
from sqlalchemy import Column, BigInteger, Integer, JSON, String, ForeignKey
from sqlalchemy.orm import relationship

from easystock.database import Base
from easystock.entities import Sale, SaleItem
from easystock.models.types import Money, Timestamp


class SaleRecord(Base):
    """Sale header. ``id`` is the time-ordered numeric sale id."""

    __tablename__ = 'sale'

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    date = Column(Timestamp, nullable=False)
    total = Column(Money, nullable=False)
    customer_id = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    payment_ids = Column(JSON, nullable=False, default=list)

    lines = relationship(
        'SaleLineRecord',
        back_populates='sale',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='SaleLineRecord.position',
    )

    def __repr__(self):
        return f"<SaleRecord(id={self.id}, total={self.total})>"

    @classmethod
    def from_entity(cls, sale: Sale):
        record = cls(id=sale.id)
        record.update_from(sale)
        return record

    def update_from(self, sale: Sale):
        self.date = sale.date
        self.total = sale.total
        self.customer_id = sale.customer_id
        self.customer_name = sale.customer_name
        self.payment_ids = list(sale.payment_ids or [])
        self.lines = [
            SaleLineRecord.from_entity(item, position)
            for position, item in enumerate(sale.items)
        ]

    def to_entity(self) -> Sale:
        return Sale(
            id=self.id,
            date=self.date,
            total=self.total,
            customer_id=self.customer_id,
            customer_name=self.customer_name,
            payment_ids=list(self.payment_ids or []),
            items=[line.to_entity() for line in self.lines],
        )


class SaleLineRecord(Base):
    """Sale line with its cost snapshot. Not linked to product (products may be deleted)."""

    __tablename__ = 'sale_line'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(BigInteger, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Money, nullable=False)
    total_cost = Column(Money, nullable=False, default=0)

    sale = relationship('SaleRecord', back_populates='lines')

    def __repr__(self):
        return f"<SaleLineRecord(sale_id={self.sale_id}, product_id='{self.product_id}', quantity={self.quantity})>"

    @classmethod
    def from_entity(cls, item: SaleItem, position: int = 0):
        return cls(
            position=position,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            price=item.price,
            total_cost=item.total_cost,
        )

    def to_entity(self) -> SaleItem:
        return SaleItem(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            price=self.price,
            total_cost=self.total_cost,
        )
