# server/core/executor.py

import re
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from sqlalchemy import text
from sqlalchemy.engine import Engine, Connection
from sqlalchemy.exc import SQLAlchemyError
from core.catalog import SchemaCatalog, TableInfo
from core.errors import (
    InvalidRequest,
    RecordNotFound,
    StorageError,
    TableExists,
    TableNotFound,
)
from core.identifiers import validate_identifier
from core.protection import ProtectionPolicy
from core.security import pwd_context, get_password_hash
from models.user import ADMIN_TABLE


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0

# Column fields never returned from the admin table
HIDDEN_ADMIN_FIELDS = ("password_hash",)

COLUMN_TYPE_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_ ]*(\(\s*\d+\s*(,\s*\d+\s*)?\))?")


def hash_credential(value) -> str:
    """
    Admin credentials are always stored hashed: values that are already a
    known hash are kept, anything else is treated as a password.
    """
    if not isinstance(value, str) or not value:
        raise InvalidRequest("password_hash must be a non-empty string")
    if pwd_context.identify(value, required=False):
        return value
    return get_password_hash(value)


@dataclass
class ColumnDef:
    name: str
    type: str
    constraints: str | None = None


class CrudExecutor:
    """
    Generic CRUD over any table known to the catalog.

    Table and column names are validated and quoted before they are placed in
    a statement; values are always bound parameters.
    """

    def __init__(self, engine: Engine, catalog: SchemaCatalog, policy: ProtectionPolicy | None = None):
        self.engine = engine
        self.catalog = catalog
        self.policy = policy or ProtectionPolicy()
        self._preparer = engine.dialect.identifier_preparer

    # -------------------------------
    # Helpers
    # -------------------------------

    def _quote(self, name: str) -> str:
        return self._preparer.quote_identifier(validate_identifier(name))

    def require_table(self, table: str) -> TableInfo:
        validate_identifier(table)
        info = self.catalog.describe_table(table)
        if info is None:
            raise TableNotFound()
        return info

    @contextmanager
    def _storage(self, action: str, table: str):
        try:
            yield
        except SQLAlchemyError:
            logger.exception("Error %s table %s", action, table)
            raise StorageError(f"Failed to {action} table")

    @staticmethod
    def _present(table: str, row) -> dict | None:
        if row is None:
            return None
        record = dict(row)
        if table == ADMIN_TABLE:
            for name in HIDDEN_ADMIN_FIELDS:
                record.pop(name, None)
        return record

    @staticmethod
    def _writable(table: str, fields: dict) -> dict:
        if not isinstance(fields, dict):
            raise InvalidRequest("Request body must be a JSON object")
        data = {key: value for key, value in fields.items() if key != "id"}
        for column in data:
            validate_identifier(column)
        if table == ADMIN_TABLE and "password_hash" in data:
            data["password_hash"] = hash_credential(data["password_hash"])
        return data

    def _fetch(self, conn: Connection, table: str, record_id):
        return conn.execute(
            text(f"SELECT * FROM {self._quote(table)} WHERE id = :id"),
            {"id": record_id},
        ).mappings().first()

    # -------------------------------
    # Reads
    # -------------------------------

    def list_records(self, table: str, limit: int = DEFAULT_LIMIT, offset: int = DEFAULT_OFFSET) -> tuple[list[dict], int]:
        self.require_table(table)
        if limit < 1 or offset < 0:
            raise InvalidRequest("limit must be positive and offset non-negative")

        quoted = self._quote(table)
        with self._storage("read from", table), self.engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT * FROM {quoted} LIMIT :limit OFFSET :offset"),
                {"limit": limit, "offset": offset},
            ).mappings().all()
            total = conn.execute(text(f"SELECT COUNT(*) FROM {quoted}")).scalar_one()

        return [self._present(table, row) for row in rows], total

    def row_count(self, table: str) -> int:
        self.require_table(table)
        with self._storage("count rows in", table), self.engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {self._quote(table)}")).scalar_one()

    def get_by_id(self, table: str, record_id: int) -> dict:
        self.require_table(table)
        with self._storage("read from", table), self.engine.connect() as conn:
            row = self._fetch(conn, table, record_id)
        if row is None:
            raise RecordNotFound()
        return self._present(table, row)

    # -------------------------------
    # Writes
    # -------------------------------

    def insert(self, table: str, fields: dict) -> dict:
        self.require_table(table)
        data = self._writable(table, fields)

        quoted = self._quote(table)
        if data:
            columns = ", ".join(self._quote(column) for column in data)
            placeholders = ", ".join(f":p{i}" for i in range(len(data)))
            sql = f"INSERT INTO {quoted} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {quoted} DEFAULT VALUES"
        params = {f"p{i}": value for i, value in enumerate(data.values())}

        with self._storage("insert into", table), self.engine.begin() as conn:
            if self.engine.dialect.insert_returning:
                row = conn.execute(text(sql + " RETURNING *"), params).mappings().first()
            else:
                result = conn.execute(text(sql), params)
                row = self._fetch(conn, table, result.lastrowid)

        return self._present(table, row)

    def update(self, table: str, record_id: int, fields: dict) -> dict:
        self.require_table(table)
        data = self._writable(table, fields)
        if not data:
            return self.get_by_id(table, record_id)

        assignments = ", ".join(f"{self._quote(column)} = :p{i}" for i, column in enumerate(data))
        sql = f"UPDATE {self._quote(table)} SET {assignments} WHERE id = :id"
        params = {f"p{i}": value for i, value in enumerate(data.values())}
        params["id"] = record_id

        with self._storage("update", table), self.engine.begin() as conn:
            self.policy.check_update(conn, table, record_id, data)
            if self.engine.dialect.update_returning:
                row = conn.execute(text(sql + " RETURNING *"), params).mappings().first()
            else:
                result = conn.execute(text(sql), params)
                row = self._fetch(conn, table, record_id) if result.rowcount else None

        if row is None:
            raise RecordNotFound()
        return self._present(table, row)

    def delete(self, table: str, record_id: int) -> bool:
        self.require_table(table)
        with self._storage("delete from", table), self.engine.begin() as conn:
            if table == ADMIN_TABLE:
                return self.policy.delete_admin(conn, record_id)
            result = conn.execute(
                text(f"DELETE FROM {self._quote(table)} WHERE id = :id"),
                {"id": record_id},
            )
            return result.rowcount > 0

    # -------------------------------
    # Table management
    # -------------------------------

    def create_table(self, name: str, column_defs: list[ColumnDef]) -> TableInfo:
        """
        Creates a table from (name, type, constraints) column definitions.
        Constraint text is appended verbatim; only administrators reach this.
        """
        validate_identifier(name)
        if not column_defs:
            raise InvalidRequest("Table name and columns are required")
        if self.catalog.describe_table(name) is not None:
            raise TableExists()

        definitions = []
        for column in column_defs:
            if not isinstance(column.type, str) or not COLUMN_TYPE_PATTERN.fullmatch(column.type.strip()):
                raise InvalidRequest("Invalid column type")
            parts = [self._quote(column.name), column.type.strip()]
            if column.constraints:
                parts.append(column.constraints)
            definitions.append(" ".join(parts))

        sql = f"CREATE TABLE {self._quote(name)} ({', '.join(definitions)})"
        with self._storage("create", name), self.engine.begin() as conn:
            conn.exec_driver_sql(sql)

        logger.info("Table %s created", name)
        return self.catalog.describe_table(name)

    def drop_table(self, name: str) -> bool:
        validate_identifier(name)
        self.policy.check_drop(name)
        if self.catalog.describe_table(name) is None:
            raise TableNotFound()

        with self._storage("drop", name), self.engine.begin() as conn:
            conn.exec_driver_sql(f"DROP TABLE {self._quote(name)}")

        logger.info("Table %s dropped", name)
        return True

    def stats(self) -> dict:
        tables = [
            {"name": name, "rowCount": self.row_count(name)}
            for name in self.catalog.list_tables()
        ]
        return {
            "totalTables": len(tables),
            "totalRows": sum(table["rowCount"] for table in tables),
            "tables": tables,
        }
