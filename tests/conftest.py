import pytest
import os
import uuid
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from hrdesk.database import Base, enable_sqlite_foreign_keys, get_db
from hrdesk.main import app
from hrdesk.services.email import EmailDeliveryError, get_email_sender
from hrdesk.services.storage import get_blob_storage
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)


# pysqlite defers BEGIN on its own, which breaks SAVEPOINT-based rollback.
# Take over transaction control so each test really starts a transaction.
@event.listens_for(engine, "connect")
def _driver_autocommit(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables and the built-in roles once for the whole test session."""
    from hrdesk.services.company_setup import seed_roles

    Base.metadata.create_all(bind=engine)
    with TestingSessionLocal() as session:
        seed_roles(session)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Session bound to an outer transaction that is rolled back after the test.
    Service-level commits and rollbacks only touch a savepoint.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


class FakeEmailSender:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to_email, subject, body):
        if self.fail:
            raise EmailDeliveryError("SMTP unavailable")
        self.sent.append({"to": to_email, "subject": subject, "body": body})


class FakeBlobStorage:
    def __init__(self):
        self.blobs = {}

    def save(self, filename, content, content_type=""):
        key = f"{len(self.blobs) + 1}-{filename}"
        self.blobs[key] = content
        return f"memory://{key}"


@pytest.fixture(scope="function")
def email_sender():
    return FakeEmailSender()


@pytest.fixture(scope="function")
def blob_storage():
    return FakeBlobStorage()


@pytest.fixture(scope="function")
def client(db_session, email_sender, blob_storage):
    """TestClient that uses the test session and the fake collaborators."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def company_factory(db_session):
    """Register a company; returns (owner_user, company, owner_profile)."""
    from hrdesk.schemas.auth import RegisterCompanyRequest
    from hrdesk.services.company_setup import register_company

    def _create(**overrides):
        suffix = uuid.uuid4().hex[:8]
        data = {
            "first_name": "Olive",
            "last_name": "Owner",
            "email": f"owner-{suffix}@example.com",
            "password": "OwnerPass123!",
            "job_title": "CEO",
            "phone": "555-0100",
            "company_name": f"Acme {suffix}",
            "domain": f"acme-{suffix}",
            "employee_count": "11-50",
            "country": "US",
        }
        data.update(overrides)
        return register_company(db_session, RegisterCompanyRequest(**data))
    return _create


@pytest.fixture(scope="function")
def company(company_factory):
    return company_factory()


@pytest.fixture(scope="function")
def member_factory(db_session):
    """
    Hire an employee into `company` and give them an account and membership.
    `reports_to` adds a job-information entry pointing at that profile.
    """
    from datetime import date
    from hrdesk.models.employee_history import JobInformation
    from hrdesk.models.leave_policy import LeavePolicy
    from hrdesk.models.user import Membership, User
    from hrdesk.services import auth as auth_service
    from hrdesk.services.company_setup import get_role
    from hrdesk.services.employees import create_profile

    def _create(company, first_name="Eve", role="employee", reports_to=None, with_account=True):
        policy = (
            db_session.query(LeavePolicy)
            .filter(LeavePolicy.company_id == company.id)
            .order_by(LeavePolicy.id)
            .first()
        )
        role_obj = get_role(db_session, role)
        profile = create_profile(
            db_session, company, policy,
            first_name=first_name, last_name="Tester", role_id=role_obj.id,
        )
        if reports_to is not None:
            db_session.add(JobInformation(
                employee_profile_id=profile.id,
                effective_date=date(2024, 1, 1),
                job_title="Engineer",
                reports_to_id=reports_to.id,
            ))

        user = None
        if with_account:
            user = User(
                first_name=first_name,
                last_name="Tester",
                email=f"{first_name.lower()}-{uuid.uuid4().hex[:8]}@example.com",
                hashed_password=auth_service.get_password_hash("MemberPass123!"),
            )
            db_session.add(user)
            db_session.flush()
            db_session.add(Membership(
                user_id=user.id, company_id=company.id,
                role_id=role_obj.id, employee_profile_id=profile.id,
            ))
            profile.login_access = True
        db_session.commit()
        db_session.refresh(profile)
        return user, profile
    return _create


@pytest.fixture(scope="function")
def auth_headers():
    """Bearer header for an account."""
    from hrdesk.services.auth import create_user_token

    def _headers(user):
        return {"Authorization": f"Bearer {create_user_token(user)}"}
    return _headers
