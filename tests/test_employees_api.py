from fastapi import status

from hrdesk.models.employee_history import JobInformation
from hrdesk.models.time_log import TimeLog
from hrdesk.services.membership import MembershipResolver
from hrdesk.services.time_clock import ClockState, TimeClockService


def _employees_url(company_id):
    return f"/api/companies/{company_id}/employees"


def test_employee_numbers_are_sequential(client, company, auth_headers):
    owner, comp, _ = company
    headers = auth_headers(owner)

    numbers = []
    for name in ("Ada", "Ben", "Cy"):
        response = client.post(_employees_url(comp.id), json={"first_name": name, "last_name": "Hire"}, headers=headers)
        assert response.status_code == status.HTTP_201_CREATED
        numbers.append(response.json()["data"]["employee_number"])
    assert numbers == [2, 3, 4]

    response = client.get(f"{_employees_url(comp.id)}/names", headers=headers)
    assert [e["employee_number"] for e in response.json()["data"]] == [1, 2, 3, 4]


def test_only_owner_hires(client, company, member_factory, auth_headers):
    _, comp, _ = company
    mgr_user, _ = member_factory(comp, first_name="Mia", role="manager")

    response = client.post(
        _employees_url(comp.id),
        json={"first_name": "Zed", "last_name": "Hire"},
        headers=auth_headers(mgr_user),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["code"] == "NOT_AUTHORIZED"


def test_unknown_role_on_hire(client, company, auth_headers):
    owner, comp, _ = company
    response = client.post(
        _employees_url(comp.id),
        json={"first_name": "Zed", "last_name": "Hire", "role": "wizard"},
        headers=auth_headers(owner),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_employee_from_another_company_is_not_found(client, company, company_factory, auth_headers):
    owner, comp, _ = company
    _, _, other_profile = company_factory()

    response = client.get(f"{_employees_url(comp.id)}/{other_profile.id}", headers=auth_headers(owner))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_personal_info_ssn_is_masked(client, company, member_factory, auth_headers):
    _, comp, _ = company
    user, profile = member_factory(comp, first_name="Sue")
    url = f"{_employees_url(comp.id)}/{profile.id}"

    response = client.put(
        f"{url}/personal-info",
        json={"first_name": "Susan", "last_name": "Tester", "ssn": "123-45-6789", "city": "Austin"},
        headers=auth_headers(user),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["first_name"] == "Susan"
    assert "ssn" not in response.json()["data"]

    detail = client.get(url, headers=auth_headers(user)).json()["data"]
    assert detail["ssn_last4"] == "6789"
    assert detail["city"] == "Austin"


def test_employee_cannot_grant_self_login_access(client, company, member_factory, auth_headers):
    _, comp, _ = company
    user, profile = member_factory(comp, first_name="Sue")

    response = client.put(
        f"{_employees_url(comp.id)}/{profile.id}/personal-info",
        json={"first_name": "Sue", "last_name": "Tester", "login_access": False},
        headers=auth_headers(user),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_history_add_update_remove(client, company, member_factory, auth_headers):
    owner, comp, owner_profile = company
    _, profile = member_factory(comp, first_name="Hal")
    url = f"{_employees_url(comp.id)}/{profile.id}/history/jobInformation"
    headers = auth_headers(owner)

    response = client.post(
        url,
        json={"effective_date": "2024-02-01", "job_title": "Analyst", "reports_to_id": owner_profile.id},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    entry_id = response.json()["data"]["id"]

    response = client.put(
        f"{url}/{entry_id}",
        json={"effective_date": "2024-02-01", "job_title": "Senior Analyst", "reports_to_id": owner_profile.id},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["job_title"] == "Senior Analyst"

    detail = client.get(f"{_employees_url(comp.id)}/{profile.id}", headers=headers).json()["data"]
    assert detail["reports_to_id"] == owner_profile.id

    response = client.delete(f"{url}/{entry_id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK

    response = client.delete(f"{url}/{entry_id}", headers=headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["message"] == "Field item not found"


def test_history_rejects_unknown_collection_and_bad_values(client, company, member_factory, auth_headers):
    owner, comp, _ = company
    _, profile = member_factory(comp, first_name="Hal")
    base = f"{_employees_url(comp.id)}/{profile.id}/history"
    headers = auth_headers(owner)

    response = client.post(f"{base}/hobbies", json={"effective_date": "2024-02-01"}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["message"] == "Field name is not allowed"

    response = client.post(f"{base}/bonuses", json={"effective_date": "2024-02-01"}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["message"] == "Invalid field value"

    response = client.post(
        f"{base}/jobInformation",
        json={"effective_date": "2024-02-01", "reports_to_id": profile.id},
        headers=headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_history_requires_manager_or_owner(client, company, member_factory, auth_headers):
    _, comp, _ = company
    mgr_user, manager = member_factory(comp, first_name="Mia", role="manager")
    peer_user, _ = member_factory(comp, first_name="Pia", reports_to=manager)
    _, profile = member_factory(comp, first_name="Hal", reports_to=manager)
    url = f"{_employees_url(comp.id)}/{profile.id}/history/bonuses"
    payload = {"effective_date": "2024-12-15", "amount": 500, "reason": "Year end"}

    response = client.post(url, json=payload, headers=auth_headers(peer_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post(url, json=payload, headers=auth_headers(mgr_user))
    assert response.status_code == status.HTTP_201_CREATED


def test_org_chart(client, company, member_factory, auth_headers):
    owner, comp, owner_profile = company
    _, manager = member_factory(comp, first_name="Mia", role="manager", reports_to=owner_profile)
    _, report = member_factory(comp, first_name="Ray", reports_to=manager)

    response = client.get(f"{_employees_url(comp.id)}/org-chart", headers=auth_headers(owner))
    assert response.status_code == status.HTTP_200_OK
    roots = response.json()["data"]
    assert [r["id"] for r in roots] == [owner_profile.id]
    assert [c["id"] for c in roots[0]["reports"]] == [manager.id]
    assert [c["id"] for c in roots[0]["reports"][0]["reports"]] == [report.id]


def test_owner_cannot_delete_self(client, company, member_factory, auth_headers):
    owner, comp, owner_profile = company
    _, profile = member_factory(comp, first_name="Del")
    headers = auth_headers(owner)

    response = client.delete(f"{_employees_url(comp.id)}/{owner_profile.id}", headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.delete(f"{_employees_url(comp.id)}/{profile.id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    response = client.get(f"{_employees_url(comp.id)}/{profile.id}", headers=headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_profile_picture_upload(client, company, member_factory, auth_headers, blob_storage):
    _, comp, _ = company
    user, profile = member_factory(comp, first_name="Pic")

    response = client.post(
        f"{_employees_url(comp.id)}/{profile.id}/profile-picture",
        files={"image": ("me.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(user),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["image_url"].startswith("memory://")
    assert len(blob_storage.blobs) == 1


def test_required_approver_falls_back_to_owner(client, company, member_factory, auth_headers):
    owner, comp, owner_profile = company
    _, loner = member_factory(comp, first_name="Lou")
    _, manager = member_factory(comp, first_name="Mia", role="manager")
    _, report = member_factory(comp, first_name="Ray", reports_to=manager)
    headers = auth_headers(owner)

    response = client.get(f"{_employees_url(comp.id)}/{loner.id}/approvers/timeOffRequests", headers=headers)
    assert response.json()["data"]["approver"] == "account_owner"
    assert response.json()["data"]["employee_profile_id"] == owner_profile.id

    response = client.get(f"{_employees_url(comp.id)}/{report.id}/approvers/timeOffRequests", headers=headers)
    assert response.json()["data"]["approver"] == "manager"
    assert response.json()["data"]["employee_profile_id"] == manager.id

    response = client.get(f"{_employees_url(comp.id)}/{report.id}/approvers/parking", headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_deleted_employee_leaves_nothing_behind(client, company, member_factory, auth_headers, db_session):
    owner, comp, owner_profile = company
    gone_user, gone = member_factory(comp, first_name="Gone", role="manager")
    _, report = member_factory(comp, first_name="Ray", reports_to=gone)
    headers = auth_headers(owner)

    membership = MembershipResolver(db_session).resolve(gone_user.id, comp.id)
    TimeClockService(db_session, membership).update_time_log(gone.id, "clock-in")
    gone_id = gone.id
    job_id = report.job_information[0].id

    response = client.delete(f"{_employees_url(comp.id)}/{gone_id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK

    db_session.expire_all()
    assert db_session.query(TimeLog).filter(TimeLog.employee_profile_id == gone_id).count() == 0
    assert db_session.get(JobInformation, job_id).reports_to_id is None

    response = client.post(_employees_url(comp.id), json={"first_name": "Newbie", "last_name": "Hire"}, headers=headers)
    new_id = response.json()["data"]["id"]
    assert new_id != gone_id

    owner_membership = MembershipResolver(db_session).resolve(owner.id, comp.id)
    assert TimeClockService(db_session, owner_membership).clock_state(new_id) == ClockState.IDLE
