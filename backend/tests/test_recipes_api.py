import json

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app.main import create_app
from conftest import FakeRemote, make_settings

SCRAMBLE = [{"generated_text": "Recipe Title: Tomato Scramble\nCooking Time: 15 minutes\nServings: 2"}]
ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}


def make_client(*responses, **settings):
    settings = make_settings(**settings)
    remote = FakeRemote(*(responses or (httpx.Response(200, json=SCRAMBLE),)))
    app = create_app(settings, generation_client=remote.client(settings))
    return TestClient(app), remote


@pytest.fixture
def api():
    return make_client()


def create(client, headers=ALICE, **body):
    body.setdefault("ingredients", ["tomato", "egg"])
    res = client.post("/api/recipes/generate", json=body, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_health(api):
    client, _ = api
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["generation_configured"] is True


def test_requires_token(api):
    client, _ = api
    assert client.get("/api/recipes").status_code == 401
    assert client.get("/api/recipes", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_generate(api):
    client, remote = api

    recipe = create(client, cuisine="italian", difficulty="easy")

    assert recipe["title"] == "Tomato Scramble"
    assert recipe["cooking_time"] == "15 minutes"
    assert recipe["servings"] == 2
    assert recipe["cuisine"] == "italian"
    assert recipe["difficulty"] == "easy"
    assert recipe["user"] == "alice"
    assert recipe["is_favorite"] is False
    assert len(remote.requests) == 1


def test_generate_empty_ingredients(api):
    client, remote = api

    res = client.post("/api/recipes/generate", json={"ingredients": []}, headers=ALICE)

    assert res.status_code == 400
    assert "at least one ingredient" in res.json()["message"]
    assert remote.requests == []


def test_generate_blank_ingredients(api):
    client, _ = api

    res = client.post("/api/recipes/generate", json={"ingredients": ["", "  "]}, headers=ALICE)

    assert res.status_code == 400
    assert "non-empty strings" in res.json()["message"]


def test_generate_invalid_difficulty(api):
    client, _ = api

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"], "difficulty": "insane"}, headers=ALICE)

    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"


def test_generate_unconfigured():
    client, remote = make_client(hf_access_token="")

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"]}, headers=ALICE)

    assert res.status_code == 500
    assert res.json()["kind"] == "configuration"
    assert remote.requests == []


def test_model_loading():
    client, _ = make_client(httpx.Response(503, json={"error": "loading", "estimated_time": 35}))

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"]}, headers=ALICE)

    body = res.json()
    assert res.status_code == 503
    assert res.headers["Retry-After"] == "35"
    assert body["message"] == "Failed to generate recipe"
    assert body["kind"] == "remote_unavailable"
    assert body["retry_after"] == 35
    assert "diagnostics" not in body
    assert client.get("/api/recipes", headers=ALICE).json()["pagination"]["total"] == 0


def test_diagnostics_in_development():
    client, _ = make_client(httpx.Response(500, json={"error": "boom"}), environment="development")

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"]}, headers=ALICE)

    assert res.status_code == 502
    assert res.json()["kind"] == "remote_server_error"
    assert res.json()["diagnostics"] == {"status": 500, "response": {"error": "boom"}}


def test_empty_generation():
    client, _ = make_client(httpx.Response(200, json=[{"generated_text": "<s>[INST] [/INST]</s>"}]))

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"]}, headers=ALICE)

    assert res.status_code == 502
    assert res.json()["kind"] == "empty_generation"


def test_list_filters_and_pagination(api):
    client, _ = api
    create(client, cuisine="italian")
    create(client, cuisine="mexican", ingredients=["beans"])
    create(client, headers=BOB)

    res = client.get("/api/recipes", headers=ALICE).json()
    assert res["pagination"] == {"page": 1, "limit": 50, "total": 2, "pages": 1}
    assert res["recipes"][0]["cuisine"] == "mexican"

    res = client.get("/api/recipes", params={"cuisine": "italian"}, headers=ALICE).json()
    assert [r["cuisine"] for r in res["recipes"]] == ["italian"]

    res = client.get("/api/recipes", params={"search": "BEAN"}, headers=ALICE).json()
    assert res["pagination"]["total"] == 1

    res = client.get("/api/recipes", params={"limit": 1, "page": 2}, headers=ALICE).json()
    assert res["pagination"]["pages"] == 2
    assert res["recipes"][0]["cuisine"] == "italian"


def test_get_recipe_ownership(api):
    client, _ = api
    recipe = create(client)

    assert client.get(f"/api/recipes/{recipe['id']}", headers=ALICE).json() == recipe
    assert client.get(f"/api/recipes/{recipe['id']}", headers=BOB).status_code == 403
    assert client.get(f"/api/recipes/{'0' * 32}", headers=ALICE).status_code == 404
    assert client.get("/api/recipes/not-an-id", headers=ALICE).status_code == 400


def test_update_recipe(api):
    client, _ = api
    recipe = create(client)

    res = client.put(f"/api/recipes/{recipe['id']}", json={"title": "Brunch Eggs", "servings": 3}, headers=ALICE)

    assert res.status_code == 200
    assert res.json()["title"] == "Brunch Eggs"
    assert res.json()["servings"] == 3
    assert res.json()["user"] == "alice"

    res = client.put(f"/api/recipes/{recipe['id']}", json={"servings": 0}, headers=ALICE)
    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"


def test_toggle_favorite_and_filter(api):
    client, _ = api
    recipe = create(client)
    create(client)

    res = client.patch(f"/api/recipes/{recipe['id']}/favorite", headers=ALICE)
    assert res.json()["is_favorite"] is True

    res = client.get("/api/recipes", params={"is_favorite": "true"}, headers=ALICE).json()
    assert [r["id"] for r in res["recipes"]] == [recipe["id"]]

    res = client.patch(f"/api/recipes/{recipe['id']}/favorite", headers=ALICE)
    assert res.json()["is_favorite"] is False


def test_delete_recipe(api):
    client, _ = api
    recipe = create(client)

    assert client.delete(f"/api/recipes/{recipe['id']}", headers=BOB).status_code == 403

    res = client.delete(f"/api/recipes/{recipe['id']}", headers=ALICE)
    assert res.json() == {"message": "Recipe deleted successfully", "id": recipe["id"]}
    assert client.get(f"/api/recipes/{recipe['id']}", headers=ALICE).status_code == 404


def test_regenerate_keeps_servings():
    client, _ = make_client(
        httpx.Response(200, json=SCRAMBLE),
        httpx.Response(200, json={"generated_text": "Title: Chilaquiles\nTotal time: 35 minutes\nServes: 6"}),
    )
    recipe = create(client, cuisine="italian", servings=4)

    res = client.post(f"/api/recipes/{recipe['id']}/regenerate", json={"cuisine": "mexican"}, headers=ALICE)

    body = res.json()
    assert res.status_code == 200
    assert body["title"] == "Chilaquiles"
    assert body["cooking_time"] == "35 minutes"
    assert body["cuisine"] == "mexican"
    assert body["servings"] == 4


def test_regenerate_without_body(api):
    client, remote = api
    recipe = create(client, cuisine="thai")

    res = client.post(f"/api/recipes/{recipe['id']}/regenerate", headers=ALICE)

    assert res.status_code == 200
    assert "Cuisine: thai" in json.loads(remote.requests[1].content)["inputs"]


def test_regenerate_failure():
    client, _ = make_client(httpx.Response(200, json=SCRAMBLE), httpx.Response(429, json={}))
    recipe = create(client)

    res = client.post(f"/api/recipes/{recipe['id']}/regenerate", json={}, headers=ALICE)

    assert res.status_code == 429
    assert res.json()["message"] == "Failed to regenerate recipe"
    assert client.get(f"/api/recipes/{recipe['id']}", headers=ALICE).json() == recipe


def test_non_string_generation_is_empty():
    client, _ = make_client(httpx.Response(200, json={"generated_text": 5}))

    res = client.post("/api/recipes/generate", json={"ingredients": ["egg"]}, headers=ALICE)

    assert res.status_code == 502
    assert res.json()["kind"] == "empty_generation"


def test_recipe_deleted_mid_request(api, monkeypatch):
    client, _ = api
    recipe = create(client)

    async def gone(stored):
        raise KeyError(stored.id)

    monkeypatch.setattr(client.app.state.repository, "save", gone)

    res = client.put(f"/api/recipes/{recipe['id']}", json={"title": "Brunch Eggs"}, headers=ALICE)
    assert res.status_code == 404
    assert res.json()["detail"] == "Recipe not found"

    assert client.patch(f"/api/recipes/{recipe['id']}/favorite", headers=ALICE).status_code == 404

    res = client.post(f"/api/recipes/{recipe['id']}/regenerate", headers=ALICE)
    assert res.status_code == 404
    assert res.json()["kind"] == "recipe_not_found"
    assert res.json()["message"] == "Failed to regenerate recipe"
