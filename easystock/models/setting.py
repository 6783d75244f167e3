"""Key/value tenant settings (exchange rates, app settings)."""
from sqlalchemy import Column, JSON, String

from easystock.database import Base


class SettingRecord(Base):

    __tablename__ = 'setting'

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<SettingRecord(key='{self.key}')>"
