"""Expense and recurring expense models."""
from sqlalchemy import Column, Date, JSON, String

from easystock.database import Base
from easystock.entities import Expense, Frequency, RecurringExpense
from easystock.models.types import Money, Timestamp


class ExpenseRecord(Base):
    """One-time expense (manual or generated from a recurring expense)."""

    __tablename__ = 'expense'

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    date = Column(Timestamp, nullable=False, index=True)
    attachment_ids = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<ExpenseRecord(id='{self.id}', title='{self.title}', amount={self.amount})>"

    @classmethod
    def from_entity(cls, expense: Expense):
        record = cls(id=expense.id)
        record.update_from(expense)
        return record

    def update_from(self, expense: Expense):
        self.title = expense.title
        self.amount = expense.amount
        self.date = expense.date
        self.attachment_ids = list(expense.attachment_ids or [])

    def to_entity(self) -> Expense:
        return Expense(
            id=self.id,
            title=self.title,
            amount=self.amount,
            date=self.date,
            attachment_ids=list(self.attachment_ids or []),
        )


class RecurringExpenseRecord(Base):
    """Recurring expense schedule with its last-applied watermark."""

    __tablename__ = 'recurring_expense'

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    frequency = Column(String(16), nullable=False)
    start_date = Column(Date, nullable=False)
    last_applied_date = Column(Date, nullable=True)

    def __repr__(self):
        return f"<RecurringExpenseRecord(id='{self.id}', frequency='{self.frequency}')>"

    @classmethod
    def from_entity(cls, recurring: RecurringExpense):
        record = cls(id=recurring.id)
        record.update_from(recurring)
        return record

    def update_from(self, recurring: RecurringExpense):
        self.title = recurring.title
        self.amount = recurring.amount
        self.frequency = Frequency(recurring.frequency).value
        self.start_date = recurring.start_date
        self.last_applied_date = recurring.last_applied_date

    def to_entity(self) -> RecurringExpense:
        return RecurringExpense(
            id=self.id,
            title=self.title,
            amount=self.amount,
            frequency=Frequency(self.frequency),
            start_date=self.start_date,
            last_applied_date=self.last_applied_date,
        )
