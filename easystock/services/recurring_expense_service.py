"""Recurring expense application (watermark based, idempotent per period)."""
import logging
from datetime import date

from easystock.entities import Expense, RecurringExpense, RecurringStatus, new_id
from easystock.utils.dates import day_start

logger = logging.getLogger(__name__)


async def apply_due_expenses(unit, today: date) -> int:
    """
    Generate one Expense per elapsed period of every recurring expense.

    Each emitted expense is dated at its due date and moves the
    recurring expense's watermark forward by exactly one period, so a
    second run on the same day finds every schedule UP_TO_DATE and
    creates nothing.

    Args:
        unit: Open unit of work of the active store
        today: Day the schedules are evaluated against

    Returns:
        Number of expenses created
    """
    created = 0
    for recurring in await unit.list(RecurringExpense):
        emitted = 0
        while recurring.status(today) == RecurringStatus.DUE:
            due = recurring.advance()
            await unit.add(Expense(
                id=new_id(),
                title=recurring.title,
                amount=recurring.amount,
                date=day_start(due),
                attachment_ids=[],
            ))
            await unit.put(recurring)
            emitted += 1

        if emitted:
            logger.info(
                f"[RECURRING] '{recurring.title}' applied {emitted} time(s), "
                f"watermark {recurring.last_applied_date.isoformat()}"
            )
        created += emitted

    return created
