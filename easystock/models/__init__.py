"""Models package - exports all SQLAlchemy models of the local store."""
from easystock.entities import (
    Attachment, CostTitle, Customer, Employee, Expense, Payment, Product,
    RecurringExpense, Sale, UserProfile,
)
from easystock.models.product import ProductRecord, ProductCostRecord
from easystock.models.sale import SaleRecord, SaleLineRecord
from easystock.models.customer import CustomerRecord
from easystock.models.payment import PaymentRecord
from easystock.models.expense import ExpenseRecord, RecurringExpenseRecord
from easystock.models.employee import EmployeeRecord
from easystock.models.attachment import AttachmentRecord
from easystock.models.cost_title import CostTitleRecord
from easystock.models.setting import SettingRecord
from easystock.models.user_profile import UserProfileRecord

# Entity class -> row class
RECORD_TYPES = {
    Product: ProductRecord,
    Sale: SaleRecord,
    Customer: CustomerRecord,
    Payment: PaymentRecord,
    Expense: ExpenseRecord,
    RecurringExpense: RecurringExpenseRecord,
    Employee: EmployeeRecord,
    Attachment: AttachmentRecord,
    CostTitle: CostTitleRecord,
    UserProfile: UserProfileRecord,
}

__all__ = [
    'ProductRecord', 'ProductCostRecord', 'SaleRecord', 'SaleLineRecord',
    'CustomerRecord', 'PaymentRecord', 'ExpenseRecord', 'RecurringExpenseRecord',
    'EmployeeRecord', 'AttachmentRecord', 'CostTitleRecord', 'SettingRecord',
    'UserProfileRecord', 'RECORD_TYPES',
]
