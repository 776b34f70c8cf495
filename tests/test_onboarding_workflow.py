"""
Hire -> invite -> register -> accept, over the HTTP API.
"""
import re
from datetime import timedelta

import pytest
from fastapi import status

from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.user import Membership


def _invite_token(email_sender):
    return re.search(r"/onboard/(\S+)", email_sender.sent[-1]["body"]).group(1)


@pytest.fixture
def hired(client, company, auth_headers):
    owner, comp, _ = company
    response = client.post(
        f"/api/companies/{comp.id}/employees",
        json={"first_name": "Nia", "last_name": "Newhire", "role": "employee"},
        headers=auth_headers(owner),
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]


def test_hire_assigns_next_employee_number(hired):
    assert hired["employee_number"] == 2
    assert hired["login_access"] is False


def test_full_onboarding(client, company, hired, auth_headers, email_sender, db_session):
    owner, comp, _ = company

    response = client.post(
        f"/api/companies/{comp.id}/employees/{hired['employee_number']}/onboarding-invite",
        json={"email": "nia@example.com"},
        headers=auth_headers(owner),
    )
    assert response.status_code == status.HTTP_200_OK
    assert email_sender.sent[-1]["to"] == "nia@example.com"
    token = _invite_token(email_sender)

    response = client.get(f"/api/onboarding/{token}/expiry")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["company_name"] == comp.name

    response = client.post(
        "/api/onboarding/register",
        json={"first_name": "Nia", "last_name": "Newhire", "email": "nia@example.com", "password": "NiaPass123!"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    headers = {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

    response = client.post("/api/onboarding/accept", json={"token": token}, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["id"] == hired["id"]
    assert response.json()["data"]["login_access"] is True

    # The new member can now read their own profile
    response = client.get(f"/api/companies/{comp.id}/employees/{hired['id']}", headers=headers)
    assert response.status_code == status.HTTP_200_OK

    response = client.post("/api/onboarding/accept", json={"token": token}, headers=headers)
    assert response.status_code == status.HTTP_409_CONFLICT

    db_session.expire_all()
    assert db_session.query(Membership).filter(Membership.employee_profile_id == hired["id"]).count() == 1


def test_invite_email_failure_clears_token(client, company, hired, auth_headers, email_sender, db_session):
    owner, comp, _ = company
    email_sender.fail = True

    response = client.post(
        f"/api/companies/{comp.id}/employees/{hired['employee_number']}/onboarding-invite",
        json={"email": "nia@example.com"},
        headers=auth_headers(owner),
    )
    assert response.status_code == status.HTTP_502_BAD_GATEWAY

    db_session.expire_all()
    profile = db_session.get(EmployeeProfile, hired["id"])
    assert profile.onboarding_token is None
    assert profile.onboarding_token_expires is None


def test_expired_invite(client, company, hired, auth_headers, email_sender, db_session):
    owner, comp, _ = company
    client.post(
        f"/api/companies/{comp.id}/employees/{hired['employee_number']}/onboarding-invite",
        json={"email": "nia@example.com"},
        headers=auth_headers(owner),
    )
    token = _invite_token(email_sender)

    profile = db_session.get(EmployeeProfile, hired["id"])
    profile.onboarding_token_expires = profile.onboarding_token_expires - timedelta(days=2)
    db_session.commit()

    response = client.get(f"/api/onboarding/{token}/expiry")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["message"] == "Invite token expired"


def test_onboarded_employee_cannot_be_invited_again(client, company, member_factory, auth_headers):
    owner, comp, _ = company
    _, profile = member_factory(comp, first_name="Ona")

    response = client.post(
        f"/api/companies/{comp.id}/employees/{profile.employee_number}/onboarding-invite",
        json={"email": "ona@example.com"},
        headers=auth_headers(owner),
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_non_member_cannot_invite(client, company, company_factory, hired, auth_headers):
    _, comp, _ = company
    outsider, _, _ = company_factory()

    response = client.post(
        f"/api/companies/{comp.id}/employees/{hired['employee_number']}/onboarding-invite",
        json={"email": "nia@example.com"},
        headers=auth_headers(outsider),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
