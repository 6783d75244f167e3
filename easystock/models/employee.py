"""Employee model."""
from sqlalchemy import Column, String

from easystock.database import Base
from easystock.entities import Employee
from easystock.models.types import Money


class EmployeeRecord(Base):

    __tablename__ = 'employee'

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    position = Column(String, nullable=True)
    salary = Column(Money, nullable=False)
    # Salary schedule; deleted together with the employee
    recurring_expense_id = Column(String, nullable=True)

    def __repr__(self):
        return f"<EmployeeRecord(id='{self.id}', name='{self.name}')>"

    @classmethod
    def from_entity(cls, employee: Employee):
        record = cls(id=employee.id)
        record.update_from(employee)
        return record

    def update_from(self, employee: Employee):
        self.name = employee.name
        self.position = employee.position
        self.salary = employee.salary
        self.recurring_expense_id = employee.recurring_expense_id

    def to_entity(self) -> Employee:
        return Employee(
            id=self.id,
            name=self.name,
            position=self.position,
            salary=self.salary,
            recurring_expense_id=self.recurring_expense_id,
        )
