"""
Entity schema shared by the local and the remote store.

Both backends persist exactly these shapes, so a record written by one
store reads back identically from the other. Money is Decimal, quantities
are int, dates are datetime (recurring schedules use plain dates).
"""
import enum
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from easystock.exceptions import BusinessLogicError
from easystock.utils.dates import add_months, add_years


class Currency(str, enum.Enum):
    """Currencies a cost line-item can be priced in."""
    TOMAN = 'TOMAN'
    AED = 'AED'
    CNY = 'CNY'
    USD = 'USD'


# All reporting and storage totals are normalized to this currency
BASE_CURRENCY = Currency.TOMAN


class PaymentMethod(str, enum.Enum):
    CASH = 'CASH'
    CARD = 'CARD'
    ONLINE = 'ONLINE'


class Frequency(str, enum.Enum):
    MONTHLY = 'monthly'
    YEARLY = 'yearly'


class AttachmentSource(str, enum.Enum):
    """Kind of record that owns an attachment."""
    SALE = 'sale'
    EXPENSE = 'expense'
    PAYMENT = 'payment'


class UserRole(str, enum.Enum):
    USER = 'user'
    SUPERADMIN = 'superadmin'


class RecurringStatus(str, enum.Enum):
    """Watermark state of a recurring expense on a given day."""
    UP_TO_DATE = 'up_to_date'
    DUE = 'due'


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


_sale_id_lock = threading.Lock()
_last_sale_id = 0


def next_sale_id() -> int:
    """
    Time-ordered numeric sale id (milliseconds since epoch).

    Strictly increasing within the process even when two sales are
    created in the same millisecond.
    """
    global _last_sale_id
    with _sale_id_lock:
        _last_sale_id = max(int(time.time() * 1000), _last_sale_id + 1)
        return _last_sale_id


@dataclass
class ProductCost:
    """One landed-cost line of a product."""
    title: str
    amount: Decimal
    currency: Currency = BASE_CURRENCY
    id: str = field(default_factory=new_id)


@dataclass
class Product:
    """Product identified by its barcode.

    ``price`` is derived from ``costs`` and ``profit_margin`` by the store
    on every write; values set by callers are overwritten.
    """
    id: str
    name: str
    quantity: int = 0
    low_stock_threshold: int = 0
    profit_margin: Decimal = Decimal('0')
    costs: List[ProductCost] = field(default_factory=list)
    price: Decimal = Decimal('0')

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold


@dataclass
class ExchangeRate:
    """Multiplier converting one unit of ``currency`` to the base currency."""
    currency: Currency
    rate: Decimal


@dataclass
class CostTitle:
    title: str
    id: str = field(default_factory=new_id)


@dataclass
class AppSettings:
    shop_name: str


@dataclass
class Customer:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    id: Optional[str] = None


@dataclass
class SaleItem:
    """Sale line. ``total_cost`` is frozen at the moment of sale."""
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    total_cost: Decimal = Decimal('0')

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Sale:
    items: List[SaleItem]
    total: Decimal
    date: datetime
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    payment_ids: List[str] = field(default_factory=list)
    id: Optional[int] = None

    @property
    def total_cost(self) -> Decimal:
        return sum((item.total_cost for item in self.items), Decimal('0'))

    @property
    def gross_profit(self) -> Decimal:
        return self.total - self.total_cost


@dataclass
class Payment:
    amount: Decimal
    method: PaymentMethod
    date: datetime
    attachment_ids: List[str] = field(default_factory=list)
    id: Optional[str] = None


@dataclass
class Expense:
    title: str
    amount: Decimal
    date: datetime
    attachment_ids: List[str] = field(default_factory=list)
    id: Optional[str] = None


@dataclass
class RecurringExpense:
    """
    Recurring expense with a last-applied watermark.

    The watermark only moves forward, one period per ``advance()`` call.
    A schedule is DUE while the next period boundary is on or before the
    given day and UP_TO_DATE otherwise.
    """
    title: str
    amount: Decimal
    frequency: Frequency
    start_date: date
    last_applied_date: Optional[date] = None
    id: str = field(default_factory=new_id)

    @property
    def cursor(self) -> date:
        return self.last_applied_date or self.start_date

    def next_due_date(self) -> date:
        if self.frequency == Frequency.YEARLY:
            return add_years(self.cursor, 1)
        return add_months(self.cursor, 1)

    def status(self, today: date) -> RecurringStatus:
        if self.next_due_date() <= today:
            return RecurringStatus.DUE
        return RecurringStatus.UP_TO_DATE

    def advance(self) -> date:
        """Move the watermark forward by exactly one period and return it."""
        due = self.next_due_date()
        if self.last_applied_date is not None and due <= self.last_applied_date:
            raise BusinessLogicError(
                f'Watermark of recurring expense {self.id} cannot move back to {due.isoformat()}'
            )
        self.last_applied_date = due
        return due


@dataclass
class Employee:
    name: str
    position: str
    salary: Decimal
    recurring_expense_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class Attachment:
    """Receipt or document attached to a sale, expense or payment."""
    date: datetime
    description: Optional[str] = None
    receipt_number: Optional[str] = None
    image: Optional[str] = None
    source_id: Optional[str] = None
    source_type: Optional[AttachmentSource] = None
    id: Optional[str] = None


@dataclass
class UserProfile:
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN
