"""Tests for live schema introspection."""

from sqlalchemy import text


class TestSchemaCatalog:

    def test_lists_reserved_tables(self, catalog):
        tables = catalog.list_tables()

        assert "admin_users" in tables
        assert "app_users" in tables
        assert not any(name.startswith("sqlite_") for name in tables)

    def test_describe_app_users(self, catalog):
        info = catalog.describe_table("app_users")

        assert info.name == "app_users"
        columns = {col.name: col for col in info.columns}
        assert list(columns) == ["id", "email", "username", "password_hash", "created_at", "updated_at"]
        assert columns["id"].pk is True
        assert columns["email"].pk is False
        assert columns["email"].notnull is True
        assert columns["created_at"].notnull is False

    def test_describe_missing_table_is_none(self, catalog):
        assert catalog.describe_table("does_not_exist") is None

    def test_describe_malformed_name_is_none(self, catalog):
        assert catalog.describe_table("app_users; DROP TABLE app_users") is None
        assert catalog.describe_table("1table") is None

    def test_schema_changes_are_visible_immediately(self, engine, catalog):
        assert catalog.describe_table("notes") is None

        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)"))

        assert "notes" in catalog.list_tables()
        assert [col.name for col in catalog.describe_table("notes").columns] == ["id", "body"]

        with engine.begin() as conn:
            conn.execute(text("DROP TABLE notes"))

        assert catalog.describe_table("notes") is None
        assert "notes" not in catalog.list_tables()

    def test_to_dict(self, catalog):
        data = catalog.describe_table("admin_users").to_dict()

        assert data["name"] == "admin_users"
        first = data["columns"][0]
        assert set(first) == {"name", "type", "notnull", "dflt_value", "pk"}
        assert first["name"] == "id"
        assert first["type"] == "INTEGER"
        assert first["pk"] is True
