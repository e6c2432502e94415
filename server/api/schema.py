# server/api/schema.py

from typing import Any
from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends
from api.deps import get_catalog, get_current_user, get_executor, get_raw_sql
from core.catalog import SchemaCatalog
from core.envelope import success
from core.executor import ColumnDef, CrudExecutor
from core.raw_sql import RawSqlConsole
from core.security import SessionIdentity


router = APIRouter(
    prefix="/api/database",
    tags=["database"],
    dependencies=[Depends(get_current_user)],
)


class ColumnSpec(BaseModel):
    name: str
    type: str
    constraints: str | None = None


class CreateTableRequest(BaseModel):
    table_name: str = Field(alias="tableName")
    columns: list[ColumnSpec] = Field(min_length=1)


class SqlRequest(BaseModel):
    query: str
    params: list[Any] | dict[str, Any] | None = None


def describe(executor: CrudExecutor, name: str) -> dict:
    info = executor.require_table(name)
    return {"name": name, "schema": info.to_dict(), "rowCount": executor.row_count(name)}


# -------------------------------
# Table Endpoints
# -------------------------------

@router.get("/tables")
def list_tables(
    catalog: SchemaCatalog = Depends(get_catalog),
    executor: CrudExecutor = Depends(get_executor),
):
    return success([describe(executor, name) for name in catalog.list_tables()])


@router.post("/tables")
def create_table(req: CreateTableRequest, executor: CrudExecutor = Depends(get_executor)):
    columns = [ColumnDef(name=c.name, type=c.type, constraints=c.constraints) for c in req.columns]
    info = executor.create_table(req.table_name, columns)
    return success({"name": info.name, "schema": info.to_dict(), "rowCount": 0})


@router.get("/tables/{table_name}")
def get_table(table_name: str, executor: CrudExecutor = Depends(get_executor)):
    return success(describe(executor, table_name))


@router.delete("/tables/{table_name}")
def drop_table(table_name: str, executor: CrudExecutor = Depends(get_executor)):
    executor.drop_table(table_name)
    return success({"message": f"Table '{table_name}' deleted successfully"})


@router.get("/stats")
def stats(executor: CrudExecutor = Depends(get_executor)):
    return success(executor.stats())


# -------------------------------
# Raw SQL (administrators only)
# -------------------------------

@router.post("/sql")
def execute_sql(
    req: SqlRequest,
    current_user: SessionIdentity = Depends(get_current_user),
    raw_sql: RawSqlConsole = Depends(get_raw_sql),
):
    return success(raw_sql.execute(req.query, req.params, issued_by=current_user.username))
