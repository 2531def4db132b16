"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions (in-memory SQLite with foreign keys enforced)
- Sample data factories (events, relations, schedules, special periods,
  tickets)
- FastAPI test client with the database dependency overridden
"""

import os
import pytest
from datetime import date, time

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['MUSCAL_DB_URL'] = 'sqlite:///:memory:'
os.environ.setdefault('MUSCAL_ENV', 'test')

from backend.src.models import (
    Base,
    Event,
    EventRelation,
    Schedule,
    SpecialPeriod,
    Ticket,
)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # ON DELETE CASCADE on event_relations needs this on every connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating persisted Event rows directly (bypassing the service)."""
    def _create(
        type='museum',
        category='live',
        status='public',
        start_date=date(2024, 7, 1),
        end_date=None,
        start_time=None,
        end_time=None,
        is_active=True,
        **extra
    ):
        event = Event(
            type=type,
            category=category,
            status=status,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
            **extra
        )
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event

    return _create


@pytest.fixture
def sample_relation(test_db_session):
    """Factory for creating EventRelation edges directly."""
    def _create(parent, child, relation_type='related'):
        relation = EventRelation(
            parent_event_id=parent.id,
            child_event_id=child.id,
            relation_type=relation_type,
        )
        test_db_session.add(relation)
        test_db_session.commit()
        return relation

    return _create


@pytest.fixture
def sample_schedule(test_db_session):
    """Factory for creating Schedule rows (recurring by default)."""
    def _create(
        day_of_week=1,
        start_time=time(10, 0),
        end_time=time(18, 0),
        audience_type='public',
        start_date=None,
        end_date=None,
        is_exception=False,
        is_closed=False,
        description=None,
        position=0,
    ):
        schedule = Schedule(
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            audience_type=audience_type,
            start_date=start_date,
            end_date=end_date,
            is_exception=is_exception,
            is_closed=is_closed,
            description=description,
            position=position,
        )
        test_db_session.add(schedule)
        test_db_session.commit()
        test_db_session.refresh(schedule)
        return schedule

    return _create


@pytest.fixture
def sample_special_period(test_db_session):
    """Factory for creating SpecialPeriod rows."""
    def _create(
        type='holiday',
        start_date=date(2024, 7, 6),
        end_date=date(2024, 9, 1),
        name='Vacances d\'été',
        zone='all',
        is_active=True,
    ):
        period = SpecialPeriod(
            type=type,
            start_date=start_date,
            end_date=end_date,
            name=name,
            zone=zone,
            is_active=is_active,
        )
        test_db_session.add(period)
        test_db_session.commit()
        test_db_session.refresh(period)
        return period

    return _create


@pytest.fixture
def sample_ticket(test_db_session):
    """Factory for creating Ticket rows."""
    def _create(reservation_date=date(2024, 7, 1), status='paid'):
        ticket = Ticket(
            reservation_date=reservation_date,
            slot_start_time=time(10, 0),
            slot_end_time=time(11, 0),
            status=status,
        )
        test_db_session.add(ticket)
        test_db_session.commit()
        return ticket

    return _create


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.db.database import get_db

    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
