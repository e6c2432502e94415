# server/core/catalog.py

import logging
from dataclasses import dataclass, field, asdict
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from core.errors import StorageError
from core.identifiers import is_valid_identifier


logger = logging.getLogger(__name__)


@dataclass
class ColumnInfo:
    name: str
    type: str
    notnull: bool
    dflt_value: str | None
    pk: bool


@dataclass
class TableInfo:
    name: str
    columns: list[ColumnInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class SchemaCatalog:
    """
    Live view of the tables in the storage engine.

    Nothing is cached: every call builds a fresh inspector, so tables created
    or dropped by another request are visible immediately.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_tables(self) -> list[str]:
        try:
            names = inspect(self.engine).get_table_names()
        except SQLAlchemyError:
            logger.exception("Failed to list tables")
            raise StorageError()
        return [name for name in names if not name.startswith("sqlite_")]

    def describe_table(self, name: str) -> TableInfo | None:
        """
        Returns the table's columns, or None if the name is malformed or the
        table does not exist.
        """
        if not is_valid_identifier(name):
            return None

        try:
            inspector = inspect(self.engine)
            if not inspector.has_table(name):
                return None
            columns = inspector.get_columns(name)
            pk_columns = set(inspector.get_pk_constraint(name).get("constrained_columns") or [])
        except SQLAlchemyError:
            logger.exception("Error getting schema for table %s", name)
            return None

        return TableInfo(
            name=name,
            columns=[
                ColumnInfo(
                    name=col["name"],
                    type=str(col["type"]),
                    notnull=not col.get("nullable", True),
                    dflt_value=col.get("default"),
                    pk=col["name"] in pk_columns,
                )
                for col in columns
            ],
        )
