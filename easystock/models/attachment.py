"""Attachment model."""
from sqlalchemy import Column, String, Text

from easystock.database import Base
from easystock.entities import Attachment, AttachmentSource
from easystock.models.types import Timestamp


class AttachmentRecord(Base):
    """Receipt or document; ``image`` holds a data URL or an object storage URL."""

    __tablename__ = 'attachment'

    id = Column(String, primary_key=True)
    date = Column(Timestamp, nullable=False)
    description = Column(String, nullable=True)
    receipt_number = Column(String, nullable=True)
    image = Column(Text, nullable=True)
    source_id = Column(String, nullable=True, index=True)
    source_type = Column(String(16), nullable=True)

    def __repr__(self):
        return f"<AttachmentRecord(id='{self.id}', source_id='{self.source_id}')>"

    @classmethod
    def from_entity(cls, attachment: Attachment):
        record = cls(id=attachment.id)
        record.update_from(attachment)
        return record

    def update_from(self, attachment: Attachment):
        self.date = attachment.date
        self.description = attachment.description
        self.receipt_number = attachment.receipt_number
        self.image = attachment.image
        self.source_id = str(attachment.source_id) if attachment.source_id is not None else None
        self.source_type = AttachmentSource(attachment.source_type).value if attachment.source_type else None

    def to_entity(self) -> Attachment:
        return Attachment(
            id=self.id,
            date=self.date,
            description=self.description,
            receipt_number=self.receipt_number,
            image=self.image,
            source_id=self.source_id,
            source_type=AttachmentSource(self.source_type) if self.source_type else None,
        )
