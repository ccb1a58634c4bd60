import asyncio

from fastapi.testclient import TestClient

ADA = {"X-User-Name": "Ada", "X-User-Id": "u1"}


def create(client, name="Docs", link="docs.python.org", category=0, headers=ADA, **extra):
    payload = {"name": name, "link": link, "description": "", "category": category, **extra}
    response = client.post("/api/v1/entries/", json=payload, headers=headers)
    assert response.status_code == 202
    return response


def rows(client, headers=None, **params):
    response = client.get("/api/v1/entries/", params=params, headers=headers or {})
    assert response.status_code == 200
    return response.json()["rows"]


class TestEntriesAPI:
    """Test the entries endpoints"""

    def test_create_entry(self, client: TestClient):
        response = create(client, name="Docs", link="docs.python.org", category=1, hits=50)
        assert response.json() == {"status": "accepted"}

        [row] = rows(client)
        assert row["name"] == "Docs"
        assert row["href"] == "https://docs.python.org"
        assert row["category_name"] == "Internal"
        assert row["hits"] == 0

        entry = client.get(f"/api/v1/entries/{row['id']}").json()
        assert entry["user"] == "Ada"
        assert entry["userid"] == "u1"
        assert entry["hits"] == 0

    def test_create_without_session_uses_generic_user(self, client: TestClient):
        create(client, headers={})
        [row] = rows(client)
        entry = client.get(f"/api/v1/entries/{row['id']}").json()
        assert entry["user"] == "GenericUser"
        assert entry["userid"] is None

    def test_table_defaults_to_hits_descending(self, client: TestClient, sql_store):
        for name in ("a", "b", "c"):
            create(client, name=name)
        ids = {row["name"]: row["id"] for row in rows(client)}
        asyncio.run(sql_store.set_hits(ids["b"], 3))
        asyncio.run(sql_store.set_hits(ids["c"], 1))

        response = client.get("/api/v1/entries/")
        data = response.json()

        assert data["order_by"] == "hits"
        assert data["order"] == "desc"
        assert [r["name"] for r in data["rows"]] == ["b", "c", "a"]
        assert [c["id"] for c in data["columns"]] == ["name", "link", "category", "hits", "open"]

    def test_table_sorted_by_name(self, client: TestClient):
        for name in ("pear", "apple", "fig"):
            create(client, name=name)

        assert [r["name"] for r in rows(client, order_by="name", order="asc")] == ["apple", "fig", "pear"]
        assert [r["name"] for r in rows(client, order_by="name", order="desc")] == ["pear", "fig", "apple"]

    def test_non_sortable_column_rejected(self, client: TestClient):
        response = client.get("/api/v1/entries/", params={"order_by": "link"})
        assert response.status_code == 422

    def test_table_filtered_by_owner(self, client: TestClient):
        create(client, name="mine", headers=ADA)
        create(client, name="theirs", headers={"X-User-Id": "u2"})

        assert [r["name"] for r in rows(client, headers={"X-User-Id": "u1"})] == ["mine"]
        assert len(rows(client)) == 2

    def test_update_entry_keeps_hits_and_attribution(self, client: TestClient, sql_store):
        create(client)
        [row] = rows(client)
        asyncio.run(sql_store.set_hits(row["id"], 4))

        response = client.patch(
            f"/api/v1/entries/{row['id']}",
            json={"name": "Python", "link": "https://python.org", "description": "home", "category": 2, "hits": 0},
            headers={"X-User-Name": "Mallory", "X-User-Id": "u9"},
        )
        assert response.status_code == 202

        entry = client.get(f"/api/v1/entries/{row['id']}").json()
        assert entry["name"] == "Python"
        assert entry["href"] == "https://python.org"
        assert entry["category"] == 2
        assert entry["hits"] == 4
        assert entry["user"] == "Ada"
        assert entry["userid"] == "u1"

    def test_partial_update_keeps_omitted_fields(self, client: TestClient):
        client.post(
            "/api/v1/entries/",
            json={"name": "Repo", "link": "github.com", "description": "code", "category": 2},
            headers=ADA,
        )
        [row] = rows(client)

        response = client.patch(f"/api/v1/entries/{row['id']}", json={"name": "Repos"})
        assert response.status_code == 202

        entry = client.get(f"/api/v1/entries/{row['id']}").json()
        assert entry["name"] == "Repos"
        assert entry["link"] == "github.com"
        assert entry["description"] == "code"
        assert entry["category"] == 2

    def test_empty_update_changes_nothing(self, client: TestClient, diagnostics_queue):
        create(client, name="Docs", category=3)
        [row] = rows(client)

        assert client.patch(f"/api/v1/entries/{row['id']}", json={}).status_code == 202

        entry = client.get(f"/api/v1/entries/{row['id']}").json()
        assert entry["name"] == "Docs"
        assert entry["category"] == 3
        assert asyncio.run(diagnostics_queue.get_queue_length("store_failures")) == 0

    def test_create_with_unknown_category_rejected(self, client: TestClient):
        response = client.post(
            "/api/v1/entries/",
            json={"name": "Docs", "link": "docs.python.org", "category": 99},
            headers=ADA,
        )
        assert response.status_code == 422
        assert rows(client) == []

    def test_update_with_unknown_category_rejected(self, client: TestClient):
        create(client, category=1)
        [row] = rows(client)

        response = client.patch(f"/api/v1/entries/{row['id']}", json={"category": 99})
        assert response.status_code == 422
        assert client.get(f"/api/v1/entries/{row['id']}").json()["category"] == 1

    def test_delete_entry(self, client: TestClient):
        create(client)
        [row] = rows(client)

        response = client.delete(f"/api/v1/entries/{row['id']}")
        assert response.status_code == 202

        assert client.get(f"/api/v1/entries/{row['id']}").status_code == 404
        assert rows(client) == []

    def test_get_nonexistent_entry(self, client: TestClient):
        response = client.get("/api/v1/entries/nonexistent")
        assert response.status_code == 404

    def test_failed_mutation_still_accepted(self, client: TestClient, diagnostics_queue):
        """Store rejections never reach the client, only the diagnostics channel"""
        assert client.delete("/api/v1/entries/missing").status_code == 202
        assert client.patch("/api/v1/entries/missing", json={"name": "x"}).status_code == 202

        failures = asyncio.run(diagnostics_queue.consume("store_failures", batch_size=10))
        assert [(f.operation, f.entry_id) for f in failures] == [
            ("delete_by_id", "missing"),
            ("update_fields", "missing"),
        ]


class TestRedirect:
    """Test hit activation"""

    def test_redirect_to_normalized_link_and_count_hit(self, client: TestClient):
        create(client, link="www.github.com")
        [row] = rows(client)

        response = client.get(f"/go/{row['id']}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://www.github.com"

        client.get(f"/go/{row['id']}", follow_redirects=False)
        assert client.get(f"/api/v1/entries/{row['id']}").json()["hits"] == 2

    def test_https_link_left_alone(self, client: TestClient):
        create(client, link="https://example.com/page")
        [row] = rows(client)

        response = client.get(f"/go/{row['id']}", follow_redirects=False)
        assert response.headers["location"] == "https://example.com/page"

    def test_redirect_nonexistent_entry(self, client: TestClient):
        response = client.get("/go/nonexistent", follow_redirects=False)
        assert response.status_code == 404


class TestMisc:
    def test_categories(self, client: TestClient):
        response = client.get("/api/v1/categories/")
        assert response.status_code == 200
        assert response.json()[0] == {"id": 0, "name": "Startup"}

    def test_health_reports_pending_failures(self, client: TestClient):
        assert client.get("/health").json()["pending_failures"] == 0
        client.delete("/api/v1/entries/missing")
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["pending_failures"] == 1

    def test_root(self, client: TestClient):
        assert "version" in client.get("/").json()
