"""Payment model."""
from sqlalchemy import Column, JSON, String

from easystock.database import Base
from easystock.entities import Payment, PaymentMethod
from easystock.models.types import Money, Timestamp


class PaymentRecord(Base):
    """Payment received for a sale (full or partial)."""

    __tablename__ = 'payment'

    id = Column(String, primary_key=True)
    amount = Column(Money, nullable=False)
    method = Column(String(16), nullable=False)
    date = Column(Timestamp, nullable=False)
    attachment_ids = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<PaymentRecord(id='{self.id}', amount={self.amount}, method='{self.method}')>"

    @classmethod
    def from_entity(cls, payment: Payment):
        record = cls(id=payment.id)
        record.update_from(payment)
        return record

    def update_from(self, payment: Payment):
        self.amount = payment.amount
        self.method = PaymentMethod(payment.method).value
        self.date = payment.date
        self.attachment_ids = list(payment.attachment_ids or [])

    def to_entity(self) -> Payment:
        return Payment(
            id=self.id,
            amount=self.amount,
            method=PaymentMethod(self.method),
            date=self.date,
            attachment_ids=list(self.attachment_ids or []),
        )
