import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, Numeric, Enum, Uuid, Index

from scorecard.db.base import Base
from scorecard.utils.timezone import utcnow


class ScorecardElementType(str, enum.Enum):
    PERSPECTIVE = "Perspective"
    OBJECTIVE = "Objective"
    INITIATIVE = "Initiative"
    KPI = "KPI"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ScorecardElement(Base):
    __tablename__ = "scorecard_elements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(Uuid, ForeignKey("scorecard_elements.id", ondelete="CASCADE"), nullable=True)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    element_type = Column(
        Enum(ScorecardElementType, name="scorecard_element_type", values_callable=_enum_values),
        nullable=False,
    )
    owner_user_id = Column(String, nullable=True)
    weight = Column(Numeric(10, 4), nullable=False, default=1)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_scorecard_elements_org", "organization_id"),
        Index("ix_scorecard_elements_parent", "parent_id"),
    )
