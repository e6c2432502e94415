# server/core/raw_sql.py

import logging
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from core.errors import InvalidRequest, StorageError


logger = logging.getLogger(__name__)

READ_PREFIXES = ("SELECT", "WITH", "PRAGMA", "EXPLAIN")


def is_read_statement(sql: str) -> bool:
    return sql.lstrip().upper().startswith(READ_PREFIXES)


class RawSqlConsole:
    """
    Executes administrator-issued SQL as written.

    This is deliberately separate from CrudExecutor: identifiers are not
    validated and the protection policy does not apply. Every call is logged
    with the issuing account.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute(self, sql: str, params=None, issued_by: str | None = None):
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidRequest("SQL query is required")
        if params is not None and not isinstance(params, (list, tuple, dict)):
            raise InvalidRequest("params must be a list or an object")

        logger.info("Raw SQL issued by %s", issued_by or "unknown")
        bound = tuple(params) if isinstance(params, (list, tuple)) else params

        try:
            with self.engine.begin() as conn:
                result = conn.exec_driver_sql(sql, bound or None)
                if is_read_statement(sql):
                    return [dict(row) for row in result.mappings()]
                return {"changes": result.rowcount, "lastInsertRowid": result.lastrowid}
        except SQLAlchemyError:
            logger.exception("Error executing SQL")
            raise StorageError("SQL execution failed")
