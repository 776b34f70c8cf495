from fastapi import status


def test_builtin_roles_are_seeded(client, company, auth_headers):
    owner, _, _ = company
    response = client.get("/api/roles", headers=auth_headers(owner))

    assert response.status_code == status.HTTP_200_OK
    assert {"owner", "manager", "employee"} <= {r["name"] for r in response.json()["data"]}
    assert response.json()["metadata"]["count"] == len(response.json()["data"])


def test_roles_require_authentication(client):
    assert client.get("/api/roles").status_code == status.HTTP_401_UNAUTHORIZED


def test_custom_role_lifecycle(client, company, auth_headers):
    owner, _, _ = company
    headers = auth_headers(owner)

    response = client.post("/api/roles", json={"name": "auditor", "permissions": ["read"]}, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    role_id = response.json()["data"]["id"]

    response = client.post("/api/roles", json={"name": "auditor"}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.put(f"/api/roles/{role_id}", json={"name": "reviewer"}, headers=headers)
    assert response.json()["data"]["name"] == "reviewer"

    response = client.delete(f"/api/roles/{role_id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert client.get(f"/api/roles/{role_id}", headers=headers).status_code == status.HTTP_404_NOT_FOUND


def test_builtin_roles_are_protected(client, company, auth_headers):
    owner, _, _ = company
    headers = auth_headers(owner)
    roles = {r["name"]: r["id"] for r in client.get("/api/roles", headers=headers).json()["data"]}

    response = client.delete(f"/api/roles/{roles['manager']}", headers=headers)
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.put(f"/api/roles/{roles['employee']}", json={"name": "staff"}, headers=headers)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_role_held_by_pending_hire_cannot_be_deleted(client, company, auth_headers):
    owner, comp, _ = company
    headers = auth_headers(owner)
    role_id = client.post("/api/roles", json={"name": "contractor"}, headers=headers).json()["data"]["id"]

    response = client.post(
        f"/api/companies/{comp.id}/employees",
        json={"first_name": "Cal", "last_name": "Temp", "role": "contractor"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED

    response = client.delete(f"/api/roles/{role_id}", headers=headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["message"] == "Role 'contractor' is still assigned"
