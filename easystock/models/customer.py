"""Customer model."""
from sqlalchemy import Column, String

from easystock.database import Base
from easystock.entities import Customer


class CustomerRecord(Base):

    __tablename__ = 'customer'

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)

    def __repr__(self):
        return f"<CustomerRecord(id='{self.id}', name='{self.name}')>"

    @classmethod
    def from_entity(cls, customer: Customer):
        record = cls(id=customer.id)
        record.update_from(customer)
        return record

    def update_from(self, customer: Customer):
        self.name = customer.name
        self.phone = customer.phone
        self.address = customer.address

    def to_entity(self) -> Customer:
        return Customer(id=self.id, name=self.name, phone=self.phone, address=self.address)
