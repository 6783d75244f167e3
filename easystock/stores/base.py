"""
Data access contract shared by every storage backend.

``DataStore`` implements each operation once, in terms of a small
``UnitOfWork`` primitive set. A backend only supplies ``_atomic`` (run a
unit and commit it exactly once), its own ``UnitOfWork`` and the two
operations that depend on the storage engine (file upload and the
cross-tenant profile listing).
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import fields, replace
from datetime import date
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from easystock.config import Config
from easystock.entities import (
    AppSettings, Attachment, AttachmentSource, CostTitle, Customer, Employee,
    ExchangeRate, Expense, Frequency, Payment, Product, RecurringExpense, Sale,
    UserProfile, new_id,
)
from easystock.exceptions import BusinessLogicError, NotFoundError, StoreError, TransactionError
from easystock.services.currency_service import calculate_selling_price
from easystock.services.recurring_expense_service import apply_due_expenses
from easystock.services.sales_service import complete_sale
from easystock.services.settings_service import (
    read_app_settings, read_exchange_rates, write_app_settings, write_exchange_rates,
)
from easystock.services.storage_service import encode_data_url
from easystock.utils.dates import end_of_month

logger = logging.getLogger(__name__)

T = TypeVar('T')


class UnitOfWork(ABC):
    """
    Primitive storage operations available inside one atomic unit.

    ``model`` arguments are entity classes (``Product``, ``Sale``...);
    ``key`` is the entity's ``id``.
    """

    @abstractmethod
    async def get(self, model, key):
        """Return the entity stored under ``key`` or None."""

    @abstractmethod
    async def list(self, model) -> list:
        """Return every entity of a kind."""

    @abstractmethod
    async def add(self, entity) -> None:
        """Insert a new entity; raise ConflictError if the key exists."""

    @abstractmethod
    async def put(self, entity) -> None:
        """Insert or replace an entity."""

    @abstractmethod
    async def delete(self, model, key) -> None:
        """Delete an entity; deleting a missing key is a no-op."""

    @abstractmethod
    async def attachments_for(self, source_id: str) -> List[Attachment]:
        """Secondary index lookup: attachments owned by ``source_id``."""

    @abstractmethod
    async def get_setting(self, key: str) -> Any:
        """Return a JSON-compatible tenant setting or None."""

    @abstractmethod
    async def put_setting(self, key: str, value: Any) -> None:
        """Store a JSON-compatible tenant setting."""


class DataStore(ABC):
    """
    Data access contract for one tenant.

    Every operation is a coroutine. Single-record lookups return None when
    the record does not exist; every other failure surfaces as a
    ``StoreError`` subclass (``ConflictError``, ``NotFoundError``,
    ``BusinessLogicError`` or ``TransactionError``).
    """

    storage_type: str = None
    unit_of_work_class = UnitOfWork

    def __init__(self, tenant_id: str, config=Config, clock: Optional[Callable[[], date]] = None):
        self.tenant_id = tenant_id
        self.config = config
        self._clock = clock or date.today

    # =====================================================
    # BACKEND HOOKS
    # =====================================================

    @abstractmethod
    async def _atomic(self, work: Callable[[UnitOfWork], Awaitable[T]]) -> T:
        """Run ``work`` inside one transaction and commit exactly once."""

    @abstractmethod
    async def list_user_profiles(self) -> List[UserProfile]:
        """Cross-tenant profile listing; empty for non-privileged stores."""

    async def upload_file(self, data: bytes, content_type: Optional[str] = None,
                          filename: Optional[str] = None) -> str:
        """Encode an uploaded file into a storable reference."""
        return encode_data_url(data, content_type)

    async def close(self) -> None:
        """Release engine or connection pool resources."""

    async def _run(self, operation: str, work: Callable[[UnitOfWork], Awaitable[T]]) -> T:
        try:
            return await self._atomic(work)
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"[STORE] ✗ {operation} failed for tenant {self.tenant_id}: {e}")
            raise TransactionError(operation, e) from e

    async def _discard_files(self, images: List[str]) -> None:
        """Release the stored files of deleted attachments; data URLs need nothing."""

    def _reprice(self, product: Product, rates: List[ExchangeRate]) -> Product:
        return replace(product, price=calculate_selling_price(product.costs, product.profit_margin, rates))

    # =====================================================
    # PRODUCTS
    # =====================================================

    async def add_product(self, product: Product) -> Product:
        """Add a product; its price is derived from costs, margin and current rates.

        Raises:
            ConflictError: a product with the same barcode exists
        """
        async def work(unit):
            saved = self._reprice(product, await read_exchange_rates(unit))
            await unit.add(saved)
            return saved
        return await self._run('add_product', work)

    async def list_products(self) -> List[Product]:
        return await self._run('list_products', lambda unit: unit.list(Product))

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await self._run('get_product', lambda unit: unit.get(Product, product_id))

    async def update_product(self, original_id: str, product: Product) -> Product:
        """
        Update a product, possibly changing its barcode.

        A barcode change is a rekey: the old record is deleted and the new
        one inserted in the same unit, so exactly one record remains.

        Raises:
            ConflictError: the new barcode belongs to another product
        """
        async def work(unit):
            saved = self._reprice(product, await read_exchange_rates(unit))
            if original_id != saved.id:
                await unit.delete(Product, original_id)
                await unit.add(saved)
            else:
                await unit.put(saved)
            return saved
        return await self._run('update_product', work)

    async def delete_product(self, product_id: str) -> None:
        await self._run('delete_product', lambda unit: unit.delete(Product, product_id))

    # =====================================================
    # SALES & PAYMENTS
    # =====================================================

    async def add_sale(self, draft: Sale, new_customer_name: Optional[str] = None) -> Sale:
        """Complete a sale atomically (see ``sales_service.complete_sale``)."""
        return await self._run(
            'add_sale', lambda unit: complete_sale(unit, draft, new_customer_name)
        )

    async def list_sales(self) -> List[Sale]:
        """All sales, most recent first."""
        sales = await self._run('list_sales', lambda unit: unit.list(Sale))
        return sorted(sales, key=lambda sale: sale.id, reverse=True)

    async def _stage_attachments(self, unit, attachments, source_id: str,
                                 source_type: AttachmentSource) -> List[str]:
        attachment_ids = []
        for attachment in attachments or []:
            saved = replace(attachment, id=new_id(), source_id=source_id, source_type=source_type)
            await unit.add(saved)
            attachment_ids.append(saved.id)
        return attachment_ids

    async def add_payment(self, payment: Payment, attachments: List[Attachment] = None) -> str:
        """Persist a payment together with its attachments; returns the payment id."""
        async def work(unit):
            payment_id = new_id()
            attachment_ids = await self._stage_attachments(
                unit, attachments, payment_id, AttachmentSource.PAYMENT
            )
            await unit.add(replace(payment, id=payment_id, attachment_ids=attachment_ids))
            return payment_id
        return await self._run('add_payment', work)

    async def add_sale_payment(self, sale_id: int, payment: Payment,
                               attachments: List[Attachment] = None) -> str:
        """
        Record a later (partial) payment against an existing sale.

        Raises:
            NotFoundError: the sale does not exist
        """
        async def work(unit):
            sale = await unit.get(Sale, sale_id)
            if sale is None:
                raise NotFoundError(f'Sale {sale_id} not found')
            payment_id = new_id()
            attachment_ids = await self._stage_attachments(
                unit, attachments, payment_id, AttachmentSource.PAYMENT
            )
            await unit.add(replace(payment, id=payment_id, attachment_ids=attachment_ids))
            sale.payment_ids = list(sale.payment_ids) + [payment_id]
            await unit.put(sale)
            return payment_id
        return await self._run('add_sale_payment', work)

    async def get_payments_by_ids(self, ids: List[str]) -> List[Payment]:
        """Payments for the given ids; blank and unknown ids are skipped."""
        valid_ids = [payment_id for payment_id in (ids or []) if payment_id]
        if not valid_ids:
            return []

        async def work(unit):
            payments = []
            for payment_id in valid_ids:
                payment = await unit.get(Payment, payment_id)
                if payment is not None:
                    payments.append(payment)
            return payments
        return await self._run('get_payments_by_ids', work)

    # =====================================================
    # SETTINGS
    # =====================================================

    async def get_exchange_rates(self) -> List[ExchangeRate]:
        return await self._run('get_exchange_rates', read_exchange_rates)

    async def save_exchange_rates(self, rates: List[ExchangeRate]) -> None:
        """Save the rate table and reprice every product in the same unit."""
        async def work(unit):
            await write_exchange_rates(unit, rates)
            repriced = 0
            for product in await unit.list(Product):
                await unit.put(self._reprice(product, rates))
                repriced += 1
            logger.info(f"[STORE] Exchange rates saved, {repriced} product price(s) recomputed")
        await self._run('save_exchange_rates', work)

    async def get_app_settings(self) -> AppSettings:
        return await self._run(
            'get_app_settings', lambda unit: read_app_settings(unit, self.config.DEFAULT_SHOP_NAME)
        )

    async def save_app_settings(self, settings: AppSettings) -> None:
        await self._run('save_app_settings', lambda unit: write_app_settings(unit, settings))

    async def get_cost_titles(self) -> List[CostTitle]:
        return await self._run('get_cost_titles', lambda unit: unit.list(CostTitle))

    async def add_cost_title(self, cost_title: CostTitle) -> None:
        await self._run('add_cost_title', lambda unit: unit.add(cost_title))

    async def delete_cost_title(self, cost_title_id: str) -> None:
        await self._run('delete_cost_title', lambda unit: unit.delete(CostTitle, cost_title_id))

    # =====================================================
    # CUSTOMERS
    # =====================================================

    async def add_customer(self, customer: Customer) -> str:
        """Add a customer; returns its generated id."""
        saved = replace(customer, id=customer.id or new_id())

        async def work(unit):
            await unit.add(saved)
            return saved.id
        return await self._run('add_customer', work)

    async def list_customers(self) -> List[Customer]:
        return await self._run('list_customers', lambda unit: unit.list(Customer))

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        return await self._run('get_customer', lambda unit: unit.get(Customer, customer_id))

    async def update_customer(self, customer: Customer) -> None:
        if not customer.id:
            raise BusinessLogicError('Customer id is required for an update')
        await self._run('update_customer', lambda unit: unit.put(customer))

    async def delete_customer(self, customer_id: str) -> None:
        await self._run('delete_customer', lambda unit: unit.delete(Customer, customer_id))

    # =====================================================
    # EXPENSES
    # =====================================================

    async def add_expense(self, expense: Expense, attachments: List[Attachment] = None) -> Expense:
        """Persist a one-time expense with its attachments in one unit."""
        async def work(unit):
            expense_id = expense.id or new_id()
            attachment_ids = await self._stage_attachments(
                unit, attachments, expense_id, AttachmentSource.EXPENSE
            )
            saved = replace(expense, id=expense_id, attachment_ids=attachment_ids)
            await unit.add(saved)
            return saved
        return await self._run('add_expense', work)

    async def update_expense(self, expense: Expense, new_attachments: List[Attachment] = None,
                             deleted_attachment_ids: List[str] = None) -> Expense:
        """
        Update an expense and apply an attachment delta in one unit.

        Raises:
            NotFoundError: the expense does not exist
        """
        requested = set(deleted_attachment_ids or [])

        async def work(unit):
            if await unit.get(Expense, expense.id) is None:
                raise NotFoundError(f'Expense {expense.id} not found')
            deleted, images = set(), []
            for attachment_id in requested:
                attachment = await unit.get(Attachment, attachment_id)
                if attachment is not None and attachment.source_id != expense.id:
                    logger.warning(
                        f"[STORE] Attachment {attachment_id} belongs to {attachment.source_id}, "
                        f"not expense {expense.id}; skipped"
                    )
                    continue
                if attachment is not None:
                    images.append(attachment.image)
                    await unit.delete(Attachment, attachment_id)
                deleted.add(attachment_id)
            added_ids = await self._stage_attachments(
                unit, new_attachments, expense.id, AttachmentSource.EXPENSE
            )
            kept_ids = [i for i in (expense.attachment_ids or []) if i not in deleted]
            saved = replace(expense, attachment_ids=kept_ids + added_ids)
            await unit.put(saved)
            return saved, images

        saved, images = await self._run('update_expense', work)
        await self._discard_files(images)
        return saved

    async def list_expenses(self) -> List[Expense]:
        """All expenses, most recent first."""
        expenses = await self._run('list_expenses', lambda unit: unit.list(Expense))
        return sorted(expenses, key=lambda expense: expense.date, reverse=True)

    async def delete_expense(self, expense_id: str) -> None:
        """Delete an expense and every attachment it owns."""
        async def work(unit):
            images = []
            for attachment in await unit.attachments_for(expense_id):
                images.append(attachment.image)
                await unit.delete(Attachment, attachment.id)
            await unit.delete(Expense, expense_id)
            return images

        images = await self._run('delete_expense', work)
        await self._discard_files(images)

    # =====================================================
    # RECURRING EXPENSES
    # =====================================================

    async def add_recurring_expense(self, recurring: RecurringExpense) -> None:
        await self._run('add_recurring_expense', lambda unit: unit.add(recurring))

    async def list_recurring_expenses(self) -> List[RecurringExpense]:
        return await self._run('list_recurring_expenses', lambda unit: unit.list(RecurringExpense))

    async def delete_recurring_expense(self, recurring_id: str) -> None:
        await self._run(
            'delete_recurring_expense', lambda unit: unit.delete(RecurringExpense, recurring_id)
        )

    async def apply_recurring_expenses(self) -> int:
        """Generate the expenses due up to today; returns how many were created."""
        today = self._clock()
        created = await self._run(
            'apply_recurring_expenses', lambda unit: apply_due_expenses(unit, today)
        )
        logger.info(f"[RECURRING] Tenant {self.tenant_id}: {created} expense(s) generated")
        return created

    # =====================================================
    # EMPLOYEES
    # =====================================================

    async def add_employee(self, employee: Employee) -> Employee:
        """
        Add an employee together with its monthly salary recurring expense.

        The salary schedule starts at the end of the current month, so the
        first salary expense falls due one month later.
        """
        async def work(unit):
            employee_id = employee.id or new_id()
            recurring = RecurringExpense(
                id=f'salary-{employee_id}',
                title=self.config.SALARY_EXPENSE_TITLE.format(name=employee.name),
                amount=employee.salary,
                frequency=Frequency.MONTHLY,
                start_date=end_of_month(self._clock()),
            )
            saved = replace(employee, id=employee_id, recurring_expense_id=recurring.id)
            await unit.add(saved)
            await unit.add(recurring)
            return saved
        return await self._run('add_employee', work)

    async def list_employees(self) -> List[Employee]:
        return await self._run('list_employees', lambda unit: unit.list(Employee))

    async def delete_employee(self, employee_id: str) -> None:
        """Delete an employee and its linked salary recurring expense."""
        async def work(unit):
            employee = await unit.get(Employee, employee_id)
            if employee is not None and employee.recurring_expense_id:
                await unit.delete(RecurringExpense, employee.recurring_expense_id)
            await unit.delete(Employee, employee_id)
        await self._run('delete_employee', work)

    # =====================================================
    # ATTACHMENTS
    # =====================================================

    async def get_attachments_by_source(self, source_id: str) -> List[Attachment]:
        return await self._run(
            'get_attachments_by_source', lambda unit: unit.attachments_for(source_id)
        )

    # =====================================================
    # USER PROFILES
    # =====================================================

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        return await self._run('get_user_profile', lambda unit: unit.get(UserProfile, user_id))

    async def save_user_profile(self, profile: UserProfile) -> UserProfile:
        """Upsert a profile; fields left as None keep their stored value."""
        async def work(unit):
            existing = await unit.get(UserProfile, profile.id)
            merged = profile
            if existing is not None:
                changes = {
                    f.name: getattr(profile, f.name)
                    for f in fields(profile)
                    if getattr(profile, f.name) is not None
                }
                merged = replace(existing, **changes)
            await unit.put(merged)
            return merged
        return await self._run('save_user_profile', work)
