from datetime import date, timedelta

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_candidate(client: AsyncClient, auth_headers, candidate_data):
    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Candidate created successfully"
    data = body["data"]
    assert data["email"] == candidate_data["email"].lower()
    assert data["status"] == "active"
    assert data["progress"] == "highway_code"
    assert data["total_fee"] == 34000.0
    assert data["paid_amount"] == 0.0
    assert data["remaining_amount"] == 34000.0
    assert [phase["phase"] for phase in data["phases"]] == ["highway_code", "parking", "driving"]
    assert data["phases"][0]["status"] == "in_progress"
    assert all(not doc["checked"] for doc in data["documents"])


@pytest.mark.asyncio
async def test_candidate_gets_standard_documents(client: AsyncClient, auth_headers, candidate_data):
    candidate_data["date_of_birth"] = (date.today() - timedelta(days=365 * 17)).isoformat()

    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 201
    names = [doc["name"] for doc in response.json()["data"]["documents"]]
    assert len(names) == 6
    assert "Parental authorization (if under 19)" in names


@pytest.mark.asyncio
async def test_candidate_too_young(client: AsyncClient, auth_headers, candidate_data):
    candidate_data["date_of_birth"] = (date.today() - timedelta(days=365 * 10)).isoformat()

    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 400
    assert "date_of_birth" in response.json()["error"]


@pytest.mark.asyncio
async def test_create_candidate_missing_fields(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/candidates", json={"name": "Only Name"}, headers=auth_headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error.startswith("Missing required fields")
    assert "email" in error and "phone" in error and "license_type" in error


@pytest.mark.asyncio
async def test_create_candidate_bad_phone(client: AsyncClient, auth_headers, candidate_data):
    candidate_data["phone"] = "12ab"

    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 400
    assert "phone" in response.json()["error"]


@pytest.mark.asyncio
async def test_duplicate_email(client: AsyncClient, auth_headers, candidate_data, make_candidate):
    await make_candidate(email=candidate_data["email"])

    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "email already exists"}


@pytest.mark.asyncio
async def test_duplicate_phone(client: AsyncClient, auth_headers, candidate_data, make_candidate):
    await make_candidate(phone=candidate_data["phone"])

    response = await client.post("/api/v1/candidates", json=candidate_data, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "phone already exists"


@pytest.mark.asyncio
async def test_partial_update_with_name_only(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.put(
        f"/api/v1/candidates/{candidate['id']}",
        json={"name": "X"},
        headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "X"
    assert data["email"] == candidate["email"]
    assert data["phone"] == candidate["phone"]


@pytest.mark.asyncio
async def test_update_cannot_null_required_field(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.put(
        f"/api/v1/candidates/{candidate['id']}",
        json={"email": None},
        headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_to_taken_email(client: AsyncClient, auth_headers, make_candidate):
    first = await make_candidate()
    second = await make_candidate()

    response = await client.put(
        f"/api/v1/candidates/{second['id']}",
        json={"email": first["email"]},
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"] == "email already exists"


@pytest.mark.asyncio
async def test_get_unknown_candidate(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/candidates/does-not-exist", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error"] == "Candidate not found"


@pytest.mark.asyncio
async def test_soft_delete_hides_candidate(client: AsyncClient, auth_headers, make_candidate):
    kept = await make_candidate()
    deleted = await make_candidate()

    response = await client.delete(f"/api/v1/candidates/{deleted['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Candidate deleted successfully"

    response = await client.get("/api/v1/candidates", headers=auth_headers)
    ids = [c["id"] for c in response.json()["data"]]
    assert kept["id"] in ids
    assert deleted["id"] not in ids

    response = await client.get("/api/v1/candidates", params={"status": "deleted"}, headers=auth_headers)
    assert [c["id"] for c in response.json()["data"]] == [deleted["id"]]

    response = await client.get("/api/v1/candidates/count", headers=auth_headers)
    assert response.json()["data"]["total"] == 1

    # Still readable directly
    response = await client.get(f"/api/v1/candidates/{deleted['id']}", headers=auth_headers)
    assert response.json()["data"]["status"] == "deleted"


@pytest.mark.asyncio
async def test_list_pagination_and_search(client: AsyncClient, auth_headers, make_candidate):
    for index in range(3):
        await make_candidate(name=f"Student {index}")
    await make_candidate(name="Zineb Haddad", license_type="A1")

    response = await client.get("/api/v1/candidates", params={"page": 1, "limit": 2}, headers=auth_headers)
    body = response.json()
    assert body["count"] == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "pages": 2}

    response = await client.get("/api/v1/candidates", params={"search": "zineb"}, headers=auth_headers)
    assert [c["name"] for c in response.json()["data"]] == ["Zineb Haddad"]

    response = await client.get("/api/v1/candidates", params={"license_type": "A1"}, headers=auth_headers)
    assert response.json()["count"] == 1


@pytest.mark.asyncio
async def test_limit_is_capped(client: AsyncClient, auth_headers, make_candidate):
    await make_candidate()

    response = await client.get("/api/v1/candidates", params={"limit": 1000}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["pagination"]["limit"] == 100


@pytest.mark.asyncio
async def test_update_progress(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.put(
        f"/api/v1/candidates/{candidate['id']}/progress",
        json={"progress": "parking"},
        headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["progress"] == "parking"
    parking = next(p for p in data["phases"] if p["phase"] == "parking")
    assert parking["status"] == "in_progress"


@pytest.mark.asyncio
async def test_update_progress_rejects_unknown_phase(client: AsyncClient, auth_headers, make_candidate):
    candidate = await make_candidate()

    response = await client.put(
        f"/api/v1/candidates/{candidate['id']}/progress",
        json={"progress": "flying"},
        headers=auth_headers
    )

    assert response.status_code == 400
