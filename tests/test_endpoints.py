"""
Tests for the /users HTTP endpoints.
"""

import uuid

import pytest
from playhouse.pool import MaxConnectionsExceeded

from userhub.server.db import Database, UserTable, get_database


def drop_users_table():
    """Make every storage call fail with 'no such table'."""
    db = get_database()
    UserTable.drop_table()
    db.close()


class TestCreateUser:
    """Tests for POST /users."""

    def test_create_returns_201_with_generated_id(self, client):
        """Test the created user carries a fresh UUID and the given fields."""
        response = client.post("/users", json={"name": "Ann", "email": "ann@x.com"})

        assert response.status_code == 201
        body = response.json()
        assert uuid.UUID(body["id"])
        assert body["name"] == "Ann"
        assert body["email"] == "ann@x.com"

    def test_create_then_get_round_trip(self, client):
        """Test POST followed by GET returns the same user."""
        created = client.post("/users", json={"name": "Bob", "email": "bob@x.com"}).json()

        response = client.get(f"/users/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_long_values_round_trip(self, client):
        """Test name and email have no length limit."""
        payload = {"name": "n" * 1000, "email": "e" * 1000 + "@x.com"}
        created = client.post("/users", json=payload).json()

        response = client.get(f"/users/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"id": created["id"], **payload}

    def test_duplicate_payloads_create_distinct_users(self, client):
        """Test there is no duplicate detection."""
        first = client.post("/users", json={"name": "Ann", "email": "ann@x.com"}).json()
        second = client.post("/users", json={"name": "Ann", "email": "ann@x.com"}).json()

        assert first["id"] != second["id"]
        assert len(client.get("/users").json()) == 2

    @pytest.mark.parametrize("payload", [
        {"name": "Ann"},
        {"email": "ann@x.com"},
        {"name": 1, "email": "ann@x.com"},
        {},
    ])
    def test_invalid_body_is_client_error(self, client, payload):
        """Test missing or mistyped fields are rejected before the handler."""
        response = client.post("/users", json=payload)

        assert response.status_code == 422

    def test_malformed_json_is_client_error(self, client):
        """Test an unparseable body is rejected."""
        response = client.post(
            "/users",
            content=b'{"name": "Ann", ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    def test_storage_failure(self, client):
        """Test a database error becomes a static 500."""
        drop_users_table()

        response = client.post("/users", json={"name": "Ann", "email": "ann@x.com"})

        assert response.status_code == 500
        assert response.text == "Failed to insert user"


class TestListUsers:
    """Tests for GET /users."""

    def test_empty(self, client):
        """Test an empty table gives an empty array."""
        response = client.get("/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_all_users(self, client):
        """Test every created user is returned, in any order."""
        created = [
            client.post("/users", json={"name": name, "email": f"{name}@x.com"}).json()
            for name in ("ann", "bob", "cid")
        ]

        response = client.get("/users")

        assert response.status_code == 200
        assert sorted(response.json(), key=lambda u: u["id"]) == sorted(created, key=lambda u: u["id"])

    def test_storage_failure(self, client):
        """Test a database error becomes a static 500."""
        drop_users_table()

        response = client.get("/users")

        assert response.status_code == 500
        assert response.text == "Failed to fetch users"


class TestGetUser:
    """Tests for GET /users/{id}."""

    def test_unknown_id_is_404(self, client):
        """Test an id that was never created is 404, not 500."""
        response = client.get(f"/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.text == "User not found"

    def test_malformed_id_is_client_error(self, client):
        """Test a non-UUID path segment never reaches the handler."""
        response = client.get("/users/not-a-uuid")

        assert response.status_code == 422

    def test_storage_failure(self, client, ann):
        """Test a database error becomes a static 500."""
        drop_users_table()

        response = client.get(f"/users/{ann['id']}")

        assert response.status_code == 500
        assert response.text == "Error fetching user"


class TestUpdateUser:
    """Tests for PUT /users/{id}."""

    def test_name_only_keeps_email(self, client, ann):
        """Test the Ann -> Annie scenario."""
        response = client.put(f"/users/{ann['id']}", json={"name": "Annie"})

        assert response.status_code == 200
        assert response.json() == {"id": ann["id"], "name": "Annie", "email": "ann@x.com"}
        assert client.get(f"/users/{ann['id']}").json() == response.json()

    def test_email_only_keeps_name(self, client, ann):
        """Test updating just the email."""
        response = client.put(f"/users/{ann['id']}", json={"email": "ann@y.org"})

        assert response.status_code == 200
        assert response.json() == {"id": ann["id"], "name": "Ann", "email": "ann@y.org"}

    def test_both_fields(self, client, ann):
        """Test updating both fields."""
        response = client.put(f"/users/{ann['id']}", json={"name": "Annie", "email": "annie@x.com"})

        assert response.status_code == 200
        assert client.get(f"/users/{ann['id']}").json() == {
            "id": ann["id"], "name": "Annie", "email": "annie@x.com"
        }

    def test_empty_body_leaves_row_unchanged(self, client, ann):
        """Test an update with no fields is a no-op."""
        response = client.put(f"/users/{ann['id']}", json={})

        assert response.status_code == 200
        assert response.json() == ann
        assert client.get(f"/users/{ann['id']}").json() == ann

    def test_explicit_null_keeps_value(self, client, ann):
        """Test null is treated as not supplied."""
        response = client.put(f"/users/{ann['id']}", json={"name": None, "email": "a@b.c"})

        assert response.json()["name"] == "Ann"

    def test_does_not_touch_other_users(self, client, ann):
        """Test the update is scoped to one row."""
        bob = client.post("/users", json={"name": "Bob", "email": "bob@x.com"}).json()

        client.put(f"/users/{ann['id']}", json={"name": "Annie"})

        assert client.get(f"/users/{bob['id']}").json() == bob

    def test_unknown_id_is_404(self, client):
        """Test updating a missing user."""
        response = client.put(f"/users/{uuid.uuid4()}", json={"name": "Ghost"})

        assert response.status_code == 404
        assert response.text == "User not found"

    def test_mistyped_field_is_client_error(self, client, ann):
        """Test type coercion failures are rejected."""
        response = client.put(f"/users/{ann['id']}", json={"name": ["Annie"]})

        assert response.status_code == 422

    def test_storage_failure(self, client, ann):
        """Test a database error becomes a static 500."""
        drop_users_table()

        response = client.put(f"/users/{ann['id']}", json={"name": "Annie"})

        assert response.status_code == 500
        assert response.text == "Failed to update user"


class TestDeleteUser:
    """Tests for DELETE /users/{id}."""

    def test_delete_then_get_is_404(self, client, ann):
        """Test a deleted user is gone."""
        response = client.delete(f"/users/{ann['id']}")

        assert response.status_code == 200
        assert response.text == "User deleted"
        assert client.get(f"/users/{ann['id']}").status_code == 404

    def test_second_delete_is_404(self, client, ann):
        """Test deleting twice yields 200 then 404."""
        assert client.delete(f"/users/{ann['id']}").status_code == 200

        response = client.delete(f"/users/{ann['id']}")

        assert response.status_code == 404
        assert response.text == "User not found"

    def test_malformed_id_is_client_error(self, client):
        """Test a non-UUID path segment never reaches the handler."""
        assert client.delete("/users/123").status_code == 422

    def test_storage_failure(self, client, ann):
        """Test a database error becomes a static 500."""
        drop_users_table()

        response = client.delete(f"/users/{ann['id']}")

        assert response.status_code == 500
        assert response.text == "Failed to delete user"


class TestRecovery:
    """Tests for per-request failure isolation."""

    def test_failure_does_not_affect_later_requests(self, client):
        """Test the service keeps serving after a storage error."""
        drop_users_table()
        assert client.get("/users").status_code == 500

        UserTable.create_table()
        get_database().close()

        assert client.get("/users").status_code == 200

    def test_pool_exhaustion_is_static_500(self, client, monkeypatch):
        """Test a full connection pool becomes the static storage error."""
        async def exhausted(self):
            raise MaxConnectionsExceeded("Exceeded maximum connections.")

        monkeypatch.setattr(Database, "list_users", exhausted)

        response = client.get("/users")

        assert response.status_code == 500
        assert response.text == "Failed to fetch users"
