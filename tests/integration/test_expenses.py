"""
Integration tests for expenses and their attachments (both backends).
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from easystock.entities import Attachment, AttachmentSource, Expense
from easystock.exceptions import NotFoundError, TransactionError


def attachment(description, receipt_number=None):
    return Attachment(
        date=datetime(2026, 3, 10),
        description=description,
        receipt_number=receipt_number,
        image='data:image/png;base64,AAAA',
    )


def expense(title='Electricity', amount='250000', when=datetime(2026, 3, 10)):
    return Expense(title=title, amount=Decimal(amount), date=when)


class TestAddExpense:
    """Tests for add_expense."""

    async def test_attachments_are_indexed_by_owner(self, store):
        saved = await store.add_expense(expense(), [attachment('Bill'), attachment('Stamp', 'R-7')])

        attachments = await store.get_attachments_by_source(saved.id)

        assert sorted(a.id for a in attachments) == sorted(saved.attachment_ids)
        assert {a.source_type for a in attachments} == {AttachmentSource.EXPENSE}
        assert {a.description for a in attachments} == {'Bill', 'Stamp'}

    async def test_input_entities_are_not_mutated(self, store):
        draft = expense()
        files = [attachment('Bill')]

        await store.add_expense(draft, files)

        assert draft.id is None
        assert files[0].source_id is None

    async def test_failed_attachment_write_rolls_back_expense(self, store, monkeypatch):
        original_add = store.unit_of_work_class.add

        async def failing_add(self, entity):
            if isinstance(entity, Attachment) and entity.description == 'broken':
                raise RuntimeError('write failed')
            await original_add(self, entity)

        monkeypatch.setattr(store.unit_of_work_class, 'add', failing_add)

        with pytest.raises(TransactionError):
            await store.add_expense(expense(), [attachment('ok'), attachment('broken')])

        assert await store.list_expenses() == []

    async def test_most_recent_first(self, store):
        await store.add_expense(expense('Old', when=datetime(2026, 1, 1)))
        await store.add_expense(expense('New', when=datetime(2026, 3, 1)))
        await store.add_expense(expense('Mid', when=datetime(2026, 2, 1)))

        assert [e.title for e in await store.list_expenses()] == ['New', 'Mid', 'Old']


class TestUpdateExpense:
    """Tests for update_expense with an attachment delta."""

    async def test_attachment_delta(self, store):
        saved = await store.add_expense(expense(), [attachment('keep'), attachment('drop')])
        attachments = {a.description: a.id for a in await store.get_attachments_by_source(saved.id)}
        saved.amount = Decimal('300000')

        updated = await store.update_expense(
            saved,
            new_attachments=[attachment('added')],
            deleted_attachment_ids=[attachments['drop']],
        )

        assert updated.attachment_ids[0] == attachments['keep']
        assert len(updated.attachment_ids) == 2
        remaining = await store.get_attachments_by_source(saved.id)
        assert {a.description for a in remaining} == {'keep', 'added'}
        [stored] = await store.list_expenses()
        assert stored.amount == Decimal('300000')
        assert sorted(stored.attachment_ids) == sorted(a.id for a in remaining)

    async def test_missing_expense(self, store):
        ghost = expense()
        ghost.id = 'ghost'
        with pytest.raises(NotFoundError):
            await store.update_expense(ghost, new_attachments=[attachment('x')])
        assert await store.get_attachments_by_source('ghost') == []


async def test_delete_expense_cascades_attachments(store):
    saved = await store.add_expense(expense(), [attachment('a'), attachment('b')])
    other = await store.add_expense(expense('Water'), [attachment('c')])

    await store.delete_expense(saved.id)

    assert await store.get_attachments_by_source(saved.id) == []
    assert len(await store.get_attachments_by_source(other.id)) == 1
    assert [e.id for e in await store.list_expenses()] == [other.id]


async def test_deleting_another_expenses_attachment_is_skipped(store):
    saved = await store.add_expense(expense(), [attachment('mine')])
    other = await store.add_expense(expense('Water'), [attachment('theirs')])
    [theirs] = other.attachment_ids

    updated = await store.update_expense(saved, deleted_attachment_ids=[theirs])

    assert updated.attachment_ids == saved.attachment_ids
    assert [a.id for a in await store.get_attachments_by_source(other.id)] == [theirs]


class TestStoredValues:
    """Amounts and timestamps read back exactly as written."""

    async def test_large_amount_is_exact(self, store):
        await store.add_expense(expense(amount='12345678901234.5678'))

        [stored] = await store.list_expenses()

        assert stored.amount == Decimal('12345678901234.5678')

    async def test_timezone_is_kept(self, store):
        tehran = timezone(timedelta(hours=3, minutes=30))
        when = datetime(2026, 1, 1, 12, tzinfo=tehran)

        await store.add_expense(expense(when=when))

        [stored] = await store.list_expenses()
        assert stored.date == when
        assert stored.date.utcoffset() == timedelta(hours=3, minutes=30)

    async def test_sale_timestamp_keeps_utc(self, store, product_factory, sale_factory):
        when = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)
        await store.add_product(product_factory())

        await store.add_sale(sale_factory(('1001', 'Tea 500g', 1, '120000'), when=when))

        [sale] = await store.list_sales()
        assert sale.date.tzinfo is not None
        assert sale.date == when
