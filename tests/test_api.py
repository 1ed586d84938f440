from src.api.routes.search import get_keyword_expander
from src.main import app
from src.search.keywords import NullKeywordExpander

BASKETBALL = {
    "title": "כדורסל לילדים",
    "category": "ספורט",
    "location": "מרכז יבור, הרצליה",
    "age_group": "גילאי 6-9",
    "price": 150,
}
YOGA = {
    "title": "יוגה לגיל הזהב",
    "category": "גיל הזהב",
    "location": "מרכז נינא, הרצליה",
    "age_group": "60 ומעלה",
    "price": 80,
}


def _seed(client, *payloads):
    created = []
    for payload in payloads:
        response = client.post("/api/activities", json=payload)
        assert response.status_code == 201, response.text
        created.append(response.json())
    return created


def _titles(response):
    assert response.status_code == 200, response.text
    return [row["title"] for row in response.json()]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_without_filters_returns_catalog(client):
    _seed(client, BASKETBALL, YOGA)
    assert sorted(_titles(client.get("/api/activities"))) == sorted([BASKETBALL["title"], YOGA["title"]])


def test_city_and_price_filter(client):
    _seed(client, BASKETBALL, YOGA)
    response = client.get("/api/activities", params={"city": "הרצליה", "price_max": "100"})
    assert _titles(response) == [YOGA["title"]]


def test_numeric_query_params_are_sanitized(client):
    _seed(client, BASKETBALL, YOGA)
    response = client.get("/api/activities", params={"price_min": "1x00", "age": "abc"})
    assert _titles(response) == [BASKETBALL["title"]]


def test_search_with_expanded_keywords_and_categories(client):
    _seed(client, BASKETBALL, YOGA)
    response = client.get("/api/activities", params=[("q", "כדורעף"), ("keyword", "כדורסל")])
    assert _titles(response) == [BASKETBALL["title"]]

    response = client.get("/api/activities", params=[("category", "sport"), ("category", "golden_age")])
    assert len(_titles(response)) == 2


def test_desired_age_range_and_sort(client):
    _seed(client, BASKETBALL, YOGA)
    response = client.get("/api/activities", params={"age_min": "9", "age_max": "12"})
    assert _titles(response) == [BASKETBALL["title"]]

    response = client.get("/api/activities", params={"sort": "price-desc"})
    assert _titles(response) == [BASKETBALL["title"], YOGA["title"]]


def test_invalid_sort_is_rejected(client):
    assert client.get("/api/activities", params={"sort": "random"}).status_code == 422


def test_filter_options(client):
    _seed(client, BASKETBALL, YOGA)
    body = client.get("/api/activities/filter-options").json()
    assert body["cities"] == ["הרצליה"]
    assert sorted(body["venues"]) == sorted(["מרכז יבור", "מרכז נינא"])


def test_crud_round_trip(client):
    (created,) = _seed(client, BASKETBALL)
    activity_id = created["id"]

    response = client.patch(f"/api/activities/{activity_id}", json={"title": "כדורסל מתקדמים"})
    assert response.status_code == 200
    assert response.json()["title"] == "כדורסל מתקדמים"

    response = client.post(f"/api/activities/{activity_id}/view")
    assert response.json()["views"] == 1

    assert client.delete(f"/api/activities/{activity_id}").status_code == 204
    assert client.get(f"/api/activities/{activity_id}").status_code == 404
    assert client.patch(f"/api/activities/{activity_id}", json={"title": "x"}).status_code == 404


def test_negative_price_is_rejected(client):
    response = client.post("/api/activities", json={**BASKETBALL, "price": -1})
    assert response.status_code == 422


def test_batch_endpoints(client):
    first, second = _seed(client, BASKETBALL, YOGA)

    response = client.post(
        "/api/activities/batch-update",
        json={"ids": [first["id"], second["id"]], "updates": {"is_visible": False}},
    )
    assert response.json() == {"affected": 2}
    assert _titles(client.get("/api/activities")) == []

    response = client.post("/api/activities/batch-delete", json={"ids": [first["id"]]})
    assert response.json() == {"affected": 1}
    assert client.post("/api/activities/batch-delete", json={"ids": []}).status_code == 422


def test_import_endpoint_upserts(client):
    payload = {"activities": [{"id": "7", **YOGA}, {"id": "7", **YOGA, "title": "יוגה בערב"}]}
    assert client.post("/api/activities/import", json=payload).json() == {"affected": 2}
    assert client.get("/api/activities/7").json()["title"] == "יוגה בערב"


def test_categories_endpoint(client):
    body = client.get("/api/categories").json()
    assert {"id": "sport", "name": "ספורט"}.items() <= body[0].items()


def test_keyword_expansion_unavailable_is_advisory(client):
    response = client.post("/api/search/keywords", json={"term": "בריכה"})
    assert response.status_code == 200
    body = response.json()
    assert body["keywords"] == []
    assert body["available"] is False
    assert body["message"]


def test_keyword_expansion_uses_injected_expander(client):
    class FixedExpander:
        async def expand(self, term):
            return ["שחייה", "מים"]

    app.dependency_overrides[get_keyword_expander] = FixedExpander
    try:
        response = client.post("/api/search/keywords", json={"term": "בריכה"})
        assert response.json() == {"keywords": ["שחייה", "מים"], "available": True, "message": None}

        app.dependency_overrides[get_keyword_expander] = NullKeywordExpander
        response = client.post("/api/search/keywords", json={"term": "  "})
        assert response.json()["keywords"] == []
    finally:
        app.dependency_overrides.clear()


def test_keyword_expansion_survives_unexpected_expander_errors(client):
    class BrokenExpander:
        async def expand(self, term):
            raise ConnectionError("network down")

    app.dependency_overrides[get_keyword_expander] = BrokenExpander
    try:
        response = client.post("/api/search/keywords", json={"term": "בריכה"})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    assert response.json()["keywords"] == []
    assert response.json()["available"] is False


def test_hidden_activities_are_not_listed(client):
    hidden, shown = _seed(client, {**BASKETBALL, "is_visible": False}, YOGA)
    ids = [a["id"] for a in client.get("/api/activities").json()]
    assert ids == [shown["id"]]
    assert client.get(f"/api/activities/{hidden['id']}").status_code == 200


def test_category_management_endpoints(client):
    client.get("/api/categories")
    created = client.post("/api/categories", json={"name": "  סדנאות קיץ ", "icon_id": "emoji:🌟"})
    assert created.status_code == 201
    category = created.json()
    assert category["name"] == "סדנאות קיץ"
    assert category["id"].startswith("cat_")

    hidden = client.put(
        f"/api/categories/{category['id']}",
        json={"name": category["name"], "icon_id": category["icon_id"], "is_visible": False},
    )
    assert hidden.json()["is_visible"] is False
    assert hidden.json()["sort_order"] == category["sort_order"]

    public_ids = [c["id"] for c in client.get("/api/categories").json()]
    admin_ids = [c["id"] for c in client.get("/api/categories", params={"include_hidden": "true"}).json()]
    assert category["id"] not in public_ids
    assert category["id"] in admin_ids

    reordered = client.post("/api/categories/reorder", json={"ids": [category["id"], "sport"]}).json()
    assert [c["id"] for c in reordered][:2] == [category["id"], "sport"]
    assert client.post("/api/categories/reorder", json={"ids": ["nope"]}).status_code == 404

    assert client.delete(f"/api/categories/{category['id']}").status_code == 204
    assert client.delete(f"/api/categories/{category['id']}").status_code == 404


def test_blank_category_name_is_rejected(client):
    assert client.post("/api/categories", json={"name": "   "}).status_code == 422
