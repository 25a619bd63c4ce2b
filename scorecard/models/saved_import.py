import uuid

from sqlalchemy import Column, String, DateTime, JSON, Uuid

from scorecard.db.base import Base
from scorecard.utils.timezone import utcnow


class SavedImport(Base):
    """Reusable KPI import definition; ``schedule_config`` makes it recurring."""
    __tablename__ = "saved_imports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True)
    kpi_mappings = Column(JSON, nullable=False, default=list)
    transformations = Column(JSON, nullable=True)
    schedule_config = Column(JSON, nullable=True)
    last_run_at = Column(DateTime, nullable=True)
    created_by_user_id = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
