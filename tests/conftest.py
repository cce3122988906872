import pytest
import os
from datetime import date
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["YEAR_END_RATE_LIMIT"] = "1000/minute"

from hrleave.database import Database
from hrleave.main import create_app
from hrleave.models.leave_balance import BalanceOrigin, LeaveBalance
from hrleave.models.user import User, UserRole
from hrleave.services import auth as auth_service
from hrleave.services.leave_quota import LeaveQuotaService
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def database():
    """A fresh in-memory database per test; services commit for real."""
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture(scope="function")
def quotas(db_session):
    """Seed the default leave quota settings."""
    LeaveQuotaService(db_session).seed_defaults()
    return LeaveQuotaService(db_session).list_settings()


def _make_user(db_session, code, email, role=UserRole.EMPLOYEE, **kwargs):
    kwargs.setdefault("first_name", code)
    kwargs.setdefault("last_name", "Test")
    kwargs.setdefault("department", "Operations")
    kwargs.setdefault("company", "Alpha Corp")
    kwargs.setdefault("start_date", date(2015, 1, 5))
    kwargs.setdefault("is_active", True)
    user = User(
        employee_code=code,
        email=email,
        hashed_password=auth_service.get_password_hash("Password123!"),
        role=role,
        **kwargs,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def make_user(db_session):
    def _factory(code, email=None, role=UserRole.EMPLOYEE, **kwargs):
        return _make_user(db_session, code, email or f"{code.lower()}@alphacorp.com", role, **kwargs)
    return _factory


@pytest.fixture(scope="function")
def hr_user(db_session):
    """Default HR user for tests."""
    return _make_user(db_session, "HR001", "hr@alphacorp.com", UserRole.HR, department="Human Resources")


@pytest.fixture(scope="function")
def employee(db_session):
    return _make_user(db_session, "EMP001", "somchai@alphacorp.com")


@pytest.fixture(scope="function")
def add_balance(db_session):
    """Insert a balance row: add_balance(user, "VACATION", 2024, entitlement=10, used=3)."""
    def _add(user, leave_type, year, entitlement=0.0, used=0.0, remaining=None, carry_over=0.0,
             origin=BalanceOrigin.PROVISIONED):
        row = LeaveBalance(
            user_id=user.id,
            leave_type=leave_type,
            year=year,
            entitlement=entitlement,
            used=used,
            remaining=entitlement + carry_over - used if remaining is None else remaining,
            carry_over=carry_over,
            origin=origin.value,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _add


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    def _get_token(user):
        return auth_service.create_access_token(data={
            "sub": user.email,
            "role": user.role.value,
            "user_id": user.id,
            "type": "access"
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def client(database):
    """TestClient bound to the per-test database. Startup seeds the default quotas."""
    app = create_app(database=database)
    with TestClient(app) as c:
        yield c
