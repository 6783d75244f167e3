"""Column types that round-trip exactly on every engine."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from easystock.utils.numbers import to_decimal


class Money(TypeDecorator):
    """
    Store ``Decimal`` values as their canonical string.

    - Python value: decimal.Decimal, unquantized
    - DB value: ``str(Decimal)``, so SQLite never turns it into a float
    """
    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(to_decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)

    @property
    def python_type(self):
        return Decimal


class Timestamp(TypeDecorator):
    """Store datetimes as ISO-8601 strings, keeping any UTC offset."""
    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return value.isoformat()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return datetime.fromisoformat(value)

    @property
    def python_type(self):
        return datetime
