import os

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scorecard.api.deps import get_db
from scorecard.core.config import settings
from scorecard.db.base import Base
from scorecard.main import create_app
from scorecard.models import (
    AggregationType,
    DataType,
    Kpi,
    Organization,
    ScorecardElement,
    ScorecardElementType,
    ScoringType,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_org(db):
    def _make(name, parent=None):
        organization = Organization(name=name, parent_id=parent.id if parent else None)
        db.add(organization)
        db.commit()
        return organization
    return _make


@pytest.fixture
def make_element(db):
    def _make(organization, name, element_type=ScorecardElementType.PERSPECTIVE, parent=None, order_index=0, owner_user_id=None):
        element = ScorecardElement(
            name=name,
            organization_id=organization.id,
            parent_id=parent.id if parent else None,
            element_type=element_type,
            order_index=order_index,
            owner_user_id=owner_user_id,
        )
        db.add(element)
        db.commit()
        return element
    return _make


@pytest.fixture
def make_kpi(db, make_element):
    def _make(
        organization,
        name,
        parent=None,
        scoring_type=ScoringType.GOAL_RED_FLAG,
        data_type=DataType.NUMBER,
        aggregation_type=AggregationType.SUM,
        **kpi_fields,
    ):
        element = make_element(organization, name, element_type=ScorecardElementType.KPI, parent=parent)
        kpi = Kpi(
            scorecard_element_id=element.id,
            scoring_type=scoring_type,
            data_type=data_type,
            aggregation_type=aggregation_type,
            **kpi_fields,
        )
        db.add(kpi)
        db.commit()
        return kpi
    return _make


@pytest.fixture
def cron_secret(monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "test-cron-secret")
    return "test-cron-secret"


@pytest.fixture
def app(db):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
