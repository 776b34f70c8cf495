import re

import pytest
from fastapi import status

from hrdesk.models.user import User

REGISTRATION = {
    "first_name": "Rita",
    "last_name": "Reed",
    "email": "rita@northwind.com",
    "password": "RitaPass123!",
    "job_title": "Founder",
    "phone": "555-0199",
    "company_name": "Northwind",
    "domain": "northwind",
    "employee_count": "1-10",
    "country": "US",
}


@pytest.fixture
def registered(client):
    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]


def test_register_company(registered, db_session):
    assert registered["access_token"]
    assert registered["token_type"] == "bearer"
    assert registered["user"]["email"] == REGISTRATION["email"]

    user = db_session.query(User).filter(User.email == REGISTRATION["email"]).one()
    membership = user.memberships[0]
    assert membership.company_id == registered["company_id"]
    assert membership.role.name == "owner"
    assert membership.employee_profile.employee_number == 1


def test_register_duplicate_domain(client, registered):
    response = client.post("/api/auth/register", json={**REGISTRATION, "email": "other@northwind.com"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["message"] == "Company already exists with this domain"


def test_register_invalid_payload(client):
    response = client.post("/api/auth/register", json={**REGISTRATION, "email": "not-an-email"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    body = response.json()
    assert body["error"]["code"] == "INVALID_INPUT"
    assert any(e["field"] == "email" for e in body["error"]["details"]["errors"])


def test_login_with_domain(client, registered):
    response = client.post(
        "/api/auth/login",
        json={"email": REGISTRATION["email"], "password": REGISTRATION["password"], "domain": "northwind"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["company_id"] == registered["company_id"]


def test_login_invalid_credentials(client, registered):
    response = client.post("/api/auth/login", json={"email": REGISTRATION["email"], "password": "wrong-password"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"


def test_login_unknown_domain(client, registered):
    response = client.post(
        "/api/auth/login",
        json={"email": REGISTRATION["email"], "password": REGISTRATION["password"], "domain": "nowhere"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_me(client, registered):
    headers = {"Authorization": f"Bearer {registered['access_token']}"}
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["email"] == REGISTRATION["email"]


def test_me_accepts_token_cookie(client, registered):
    client.cookies.set("token", registered["access_token"])
    response = client.get("/api/auth/me")
    client.cookies.clear()
    assert response.status_code == status.HTTP_200_OK


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_forgot_and_reset_password(client, registered, email_sender):
    response = client.post("/api/auth/forgot-password", json={"email": REGISTRATION["email"]})
    assert response.status_code == status.HTTP_200_OK
    assert len(email_sender.sent) == 1

    token = re.search(r"/reset-password/(\S+)", email_sender.sent[0]["body"]).group(1)
    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "BrandNewPass1!"})
    assert response.status_code == status.HTTP_200_OK

    response = client.post("/api/auth/login", json={"email": REGISTRATION["email"], "password": "BrandNewPass1!"})
    assert response.status_code == status.HTTP_200_OK

    # Tokens are single use
    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "AnotherPass1!"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_forgot_password_email_failure_clears_token(client, registered, email_sender, db_session):
    email_sender.fail = True
    response = client.post("/api/auth/forgot-password", json={"email": REGISTRATION["email"]})

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["error"]["code"] == "DEPENDENCY_FAILURE"
    db_session.expire_all()
    user = db_session.query(User).filter(User.email == REGISTRATION["email"]).one()
    assert user.reset_password_token is None
    assert user.reset_password_expires is None


def test_forgot_password_unknown_email(client):
    response = client.post("/api/auth/forgot-password", json={"email": "ghost@northwind.com"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reset_token_is_stored_hashed(client, registered, email_sender, db_session):
    client.post("/api/auth/forgot-password", json={"email": REGISTRATION["email"]})
    token = re.search(r"/reset-password/(\S+)", email_sender.sent[0]["body"]).group(1)

    db_session.expire_all()
    user = db_session.query(User).filter(User.email == REGISTRATION["email"]).one()
    assert user.reset_password_token is not None
    assert user.reset_password_token != token
