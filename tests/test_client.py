"""Tests for the Python client library, run against the real app."""

import pytest

from services.api import QueryBuilder, create_client


ADMIN_PASSWORD = "admin123"


@pytest.fixture
def minibase(client):
    return create_client("http://testserver/", session=client)


@pytest.fixture
def signed_in(minibase):
    result = minibase.auth.sign_in("admin", ADMIN_PASSWORD)
    assert result["error"] is None
    return minibase


class TestAuth:

    def test_sign_in_stores_token(self, minibase):
        result = minibase.auth.sign_in("admin", ADMIN_PASSWORD)

        assert result["data"]["user"]["username"] == "admin"
        assert minibase.api_key == result["data"]["token"]

    def test_sign_in_failure(self, minibase):
        result = minibase.auth.sign_in("admin", "wrong")

        assert result == {"data": None, "error": "Invalid username or password"}
        assert minibase.api_key is None

    def test_session_and_sign_out(self, signed_in):
        session = signed_in.auth.get_session()
        assert session["data"]["user"]["username"] == "admin"

        signed_in.auth.sign_out()

        assert signed_in.auth.get_session() == {"data": None, "error": "No active session"}
        assert signed_in.from_("app_users").select().execute()["error"] == "Invalid or expired token"

    def test_invalid_session_is_cleared(self, minibase):
        minibase.set_api_key("garbage")

        assert minibase.auth.get_session() == {"data": None, "error": "Invalid session"}
        assert minibase.api_key is None


class TestTable:

    def test_insert_get_update_delete(self, signed_in):
        users = signed_in.from_("app_users")

        created = users.insert({"id": 77, "email": "c@d.e", "username": "cde", "password_hash": "h"})
        assert created["error"] is None
        record_id = created["data"]["id"]
        assert record_id != 77

        assert users.get_by_id(record_id)["data"]["username"] == "cde"

        updated = users.update(record_id, {"id": 1, "username": "renamed"})
        assert updated["data"]["id"] == record_id
        assert updated["data"]["username"] == "renamed"

        assert users.delete(record_id) == {"data": {"message": "Record deleted successfully"}, "error": None}
        assert users.get_by_id(record_id) == {"data": None, "error": "Record not found"}

    def test_query_builder_pages(self, signed_in):
        users = signed_in.table("app_users")
        for n in range(3):
            users.insert({"email": f"{n}@x.y", "username": f"n{n}", "password_hash": "h"})

        page = users.select("username").eq("username", "n0").limit(2).offset(1).execute()

        assert page["error"] is None
        assert len(page["data"]) == 2
        assert page["pagination"] == {"limit": 2, "offset": 1, "total": 3, "hasMore": False}

    def test_unknown_table_error(self, signed_in):
        assert signed_in.from_("ghosts").select().execute() == {"data": None, "error": "Table not found"}

    def test_sql(self, signed_in):
        result = signed_in.sql("SELECT COUNT(*) AS n FROM admin_users")

        assert result == {"data": [{"n": 1}], "error": None}


class TestQueryBuilder:

    def test_only_limit_and_offset_become_params(self):
        builder = (
            QueryBuilder("app_users", client=None)
            .select("id, email")
            .eq("email", "a@b.c")
            .neq("id", 1)
            .gt("id", 0)
            .lt("id", 10)
            .limit(5)
            .offset(10)
        )

        assert builder.build_params() == {"limit": 5, "offset": 10}
        assert builder.select_columns == "id, email"
        assert [c["operator"] for c in builder.where_conditions] == ["eq", "neq", "gt", "lt"]

    def test_defaults_send_no_params(self):
        assert QueryBuilder("app_users", client=None).build_params() == {}
