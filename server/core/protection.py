# server/core/protection.py

from sqlalchemy import text
from sqlalchemy.engine import Connection
from core.errors import ProtectedRecord, ProtectedTable, LastAdminProtected
from models.user import ADMIN_TABLE, RESERVED_TABLES, BOOTSTRAP_ADMIN_USERNAME


# Count and delete happen in a single statement: the last remaining admin
# cannot be removed even by concurrent deletes.
GUARDED_ADMIN_DELETE = text(
    f"DELETE FROM {ADMIN_TABLE} "
    "WHERE id = :id AND username <> :reserved "
    f"AND (SELECT COUNT(*) FROM {ADMIN_TABLE}) > 1"
)


class ProtectionPolicy:
    """
    Guards destructive operations on system-critical tables and rows.
    Every check runs before the statement it protects.
    """

    def __init__(self, reserved_tables=RESERVED_TABLES, reserved_username=BOOTSTRAP_ADMIN_USERNAME):
        self.reserved_tables = frozenset(reserved_tables)
        self.reserved_username = reserved_username

    def check_drop(self, table: str):
        if table in self.reserved_tables:
            raise ProtectedTable()

    def check_update(self, conn: Connection, table: str, record_id: int, fields: dict):
        if table != ADMIN_TABLE or "username" not in fields:
            return
        if fields["username"] == self.reserved_username:
            return
        if self._admin_username(conn, record_id) == self.reserved_username:
            raise ProtectedRecord("Cannot rename the default admin user")

    def delete_admin(self, conn: Connection, record_id: int) -> bool:
        """
        Deletes an administrative account unless it is the bootstrap account
        or the last one left. Returns False if no such account exists.
        """
        username = self._admin_username(conn, record_id)
        if username is None:
            return False
        if username == self.reserved_username:
            raise ProtectedRecord()

        remaining = conn.execute(text(f"SELECT COUNT(*) FROM {ADMIN_TABLE}")).scalar_one()
        if remaining <= 1:
            raise LastAdminProtected()

        result = conn.execute(
            GUARDED_ADMIN_DELETE,
            {"id": record_id, "reserved": self.reserved_username},
        )
        if result.rowcount > 0:
            return True

        # Lost a race with another delete between the checks and the statement.
        if self._admin_username(conn, record_id) is None:
            return False
        raise LastAdminProtected()

    def _admin_username(self, conn: Connection, record_id: int) -> str | None:
        return conn.execute(
            text(f"SELECT username FROM {ADMIN_TABLE} WHERE id = :id"),
            {"id": record_id},
        ).scalar_one_or_none()
