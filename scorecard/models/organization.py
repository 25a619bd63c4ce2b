import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid, Index

from scorecard.db.base import Base
from scorecard.utils.timezone import utcnow


class Organization(Base):
    """Organization tree node; ``parent_id`` is a plain id back-reference."""
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True)
    template_from_dataset_field = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_organizations_parent_id", "parent_id"),
    )
