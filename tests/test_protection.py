"""Tests for the protection policy over system tables and admin accounts."""

import pytest
from sqlalchemy import text

from core.catalog import SchemaCatalog
from core.errors import LastAdminProtected, ProtectedRecord, ProtectedTable
from core.executor import CrudExecutor
from core.protection import GUARDED_ADMIN_DELETE
from database import create_db_engine
from models import Base


def admin_id(executor, username):
    records, _ = executor.list_records("admin_users")
    return next(r["id"] for r in records if r["username"] == username)


@pytest.fixture
def root_only_executor(tmp_path):
    """An executor whose only administrator is named 'root', not 'admin'."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'root_only.db'}")
    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO admin_users (username, password_hash) VALUES ('root', 'x')"))
    yield CrudExecutor(engine, SchemaCatalog(engine))
    engine.dispose()


class TestAdminDeletion:

    def test_bootstrap_admin_cannot_be_deleted(self, executor):
        with pytest.raises(ProtectedRecord):
            executor.delete("admin_users", admin_id(executor, "admin"))

    def test_bootstrap_admin_protected_even_with_other_admins(self, executor):
        executor.insert("admin_users", {"username": "ops", "password_hash": "x"})

        with pytest.raises(ProtectedRecord):
            executor.delete("admin_users", admin_id(executor, "admin"))
        assert executor.row_count("admin_users") == 2

    def test_last_admin_cannot_be_deleted(self, root_only_executor):
        executor = root_only_executor

        with pytest.raises(LastAdminProtected):
            executor.delete("admin_users", admin_id(executor, "root"))
        assert executor.row_count("admin_users") == 1

    def test_other_admin_can_be_deleted(self, executor):
        ops = executor.insert("admin_users", {"username": "ops", "password_hash": "x"})

        assert executor.delete("admin_users", ops["id"]) is True
        assert executor.row_count("admin_users") == 1

    def test_deleting_missing_admin(self, executor):
        assert executor.delete("admin_users", 9999) is False

    def test_guarded_delete_refuses_last_row(self, root_only_executor):
        engine = root_only_executor.engine
        root = admin_id(root_only_executor, "root")

        with engine.begin() as conn:
            result = conn.execute(GUARDED_ADMIN_DELETE, {"id": root, "reserved": "admin"})

        assert result.rowcount == 0
        assert root_only_executor.row_count("admin_users") == 1


class TestAdminUpdates:

    def test_bootstrap_admin_cannot_be_renamed(self, executor):
        with pytest.raises(ProtectedRecord):
            executor.update("admin_users", admin_id(executor, "admin"), {"username": "boss"})

    def test_bootstrap_admin_other_fields_can_change(self, executor):
        record_id = admin_id(executor, "admin")

        updated = executor.update("admin_users", record_id, {"username": "admin", "password_hash": "new"})

        assert updated["username"] == "admin"
        assert "password_hash" not in updated

    def test_other_admin_can_be_renamed(self, executor):
        ops = executor.insert("admin_users", {"username": "ops", "password_hash": "x"})

        assert executor.update("admin_users", ops["id"], {"username": "devops"})["username"] == "devops"


class TestReservedTables:

    @pytest.mark.parametrize("table", ["admin_users", "app_users"])
    def test_reserved_tables_cannot_be_dropped(self, executor, catalog, table):
        with pytest.raises(ProtectedTable):
            executor.drop_table(table)
        assert catalog.describe_table(table) is not None
