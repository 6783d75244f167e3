"""Cost title model (reusable labels for product cost lines)."""
from sqlalchemy import Column, String

from easystock.database import Base
from easystock.entities import CostTitle


class CostTitleRecord(Base):

    __tablename__ = 'cost_title'

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)

    def __repr__(self):
        return f"<CostTitleRecord(id='{self.id}', title='{self.title}')>"

    @classmethod
    def from_entity(cls, cost_title: CostTitle):
        record = cls(id=cost_title.id)
        record.update_from(cost_title)
        return record

    def update_from(self, cost_title: CostTitle):
        self.title = cost_title.title

    def to_entity(self) -> CostTitle:
        return CostTitle(id=self.id, title=self.title)
