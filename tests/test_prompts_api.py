import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_prompts_default_page(client: AsyncClient, seeded_engine):
    response = await client.get("/api/v1/prompts")
    assert response.status_code == 200
    data = response.json()
    assert data["pagination"] == {"total": 3, "page": 1, "limit": 10, "total_pages": 1}
    assert {p["name"] for p in data["prompts"]} == {"Prompt 1", "Prompt 2", "Prompt 3"}


@pytest.mark.asyncio
async def test_list_prompts_pagination(client: AsyncClient, seeded_engine):
    response = await client.get("/api/v1/prompts", params={"page": 2, "limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert len(data["prompts"]) == 1
    assert data["pagination"]["total_pages"] == 2


@pytest.mark.asyncio
async def test_list_prompts_by_category(client: AsyncClient, seeded_engine):
    response = await client.get("/api/v1/prompts", params={"category": "Category 2"})
    data = response.json()
    assert data["pagination"]["total"] == 1
    assert data["prompts"][0]["system_message"] == "System message 2"

    response = await client.get("/api/v1/prompts", params={"category": "all"})
    assert response.json()["pagination"]["total"] == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"limit": 101}, {"limit": 0}, {"page": 0}])
async def test_list_prompts_bounds(client: AsyncClient, seeded_engine, params):
    response = await client.get("/api/v1/prompts", params=params)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_prompt_trims_fields(client: AsyncClient, seeded_engine):
    payload = {"name": "  NDA review ", "prompt": " Review this NDA. ", "category": " Contracts "}
    response = await client.post("/api/v1/prompts", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "NDA review"
    assert data["prompt"] == "Review this NDA."
    assert data["category"] == "Contracts"
    assert data["system_message"] is None
    assert "id" in data
    assert data["created_at"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "   ", "prompt": "p", "category": "c"},
        {"prompt": "p", "category": "c"},
        {"name": "x" * 101, "prompt": "p", "category": "c"},
        {"name": "n", "prompt": "p" * 5001, "category": "c"},
        {"name": "n", "prompt": "p", "category": "c" * 51},
    ],
)
async def test_create_prompt_validation(client: AsyncClient, seeded_engine, payload):
    response = await client.post("/api/v1/prompts", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_missing_prompt(client: AsyncClient, seeded_engine):
    response = await client.get("/api/v1/prompts/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_prompt(client: AsyncClient, seeded_engine):
    response = await client.put("/api/v1/prompts/1", json={"category": "Contracts", "system_message": None})
    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "Contracts"
    assert data["name"] == "Prompt 1"
    assert data["system_message"] is None


@pytest.mark.asyncio
async def test_delete_prompt(client: AsyncClient, seeded_engine):
    response = await client.delete("/api/v1/prompts/2")
    assert response.status_code == 200

    # Verify it's gone
    response = await client.get("/api/v1/prompts/2")
    assert response.status_code == 404
    list_response = await client.get("/api/v1/prompts")
    assert list_response.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_prompts_on_fresh_database(client: AsyncClient):
    """The prompt store starts empty when nothing has created the table yet"""
    response = await client.get("/api/v1/prompts")
    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 0

    payload = {"name": "First", "prompt": "Summarise this lease.", "category": "Leases"}
    response = await client.post("/api/v1/prompts", json=payload)
    assert response.status_code == 201

    response = await client.delete(f"/api/v1/prompts/{response.json()['id']}")
    assert response.status_code == 200
    # emptying the table does not bring the seed rows back
    response = await client.get("/api/v1/prompts")
    assert response.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_unknown_prompt_on_fresh_database(client: AsyncClient):
    response = await client.get("/api/v1/prompts/1")
    assert response.status_code == 404
