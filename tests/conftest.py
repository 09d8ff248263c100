"""
Pytest configuration and fixtures.
"""
from typing import Any, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from enroll_service import database, events, main, models
from enroll_service.gateway import GatewayOrder, compute_signature
from enroll_service.seed import seed_courses
from enroll_service.workflow import EnrollmentWorkflow

TEST_SECRET = "secret_default"


class FakeGateway:
    """Records order requests and hands out sequential order ids."""

    def __init__(self) -> None:
        self.orders: List[dict] = []
        self.error: Exception = None

    def create_order(self, amount_minor_units: int, currency: str, receipt: str,
                     auto_capture: bool = True) -> GatewayOrder:
        if self.error is not None:
            raise self.error
        self.orders.append({
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
            "auto_capture": auto_capture,
        })
        return GatewayOrder(
            order_id=f"order_test_{len(self.orders)}",
            amount=amount_minor_units,
            currency=currency,
            receipt=receipt,
        )


class RecordingPublisher(events.EventPublisher):
    def __init__(self) -> None:
        super().__init__("")
        self.published: List[tuple] = []

    def publish(self, routing_key: str, event: dict) -> None:
        self.published.append((routing_key, event))


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return database.make_session_factory(engine)


@pytest.fixture
def seeded(session_factory):
    seed_courses(session_factory)
    return session_factory


@pytest.fixture
def db(seeded) -> Generator[Session, Any, None]:
    session = seeded()
    yield session
    session.close()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def workflow(db, gateway) -> EnrollmentWorkflow:
    return EnrollmentWorkflow(db, gateway, TEST_SECRET, receipt_factory=lambda: "enroll_test")


@pytest.fixture
def course(db) -> models.Course:
    """The Aarambh course (price 9)."""
    return db.query(models.Course).filter(models.Course.type == models.CourseType.AARAMBH).one()


@pytest.fixture
def client(seeded, gateway, publisher, monkeypatch) -> Generator[TestClient, Any, None]:
    """HTTP client wired to the test database, fake gateway and recording publisher."""
    monkeypatch.setattr(main, "RAZORPAY_KEY_SECRET", TEST_SECRET)
    main.app.dependency_overrides[main.get_session_factory] = lambda: seeded
    main.app.dependency_overrides[main.get_gateway] = lambda: gateway
    main.app.dependency_overrides[main.get_event_publisher] = lambda: publisher
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def enrollment_data(course) -> dict:
    return {
        "name": "Aarav Sharma",
        "class": "8",
        "board": "CBSE",
        "parentName": "Rohit Sharma",
        "parentPhone": "9876543210",
        "email": "rohit.sharma@gmail.com",
        "courseId": course.id,
    }


def sign(order_id: str, payment_id: str, secret: str = TEST_SECRET) -> str:
    return compute_signature(order_id, payment_id, secret)


def count_rows(session: Session) -> dict:
    session.expire_all()
    return {
        "students": session.query(models.Student).count(),
        "enrollments": session.query(models.Enrollment).count(),
        "payments": session.query(models.Payment).count(),
    }

