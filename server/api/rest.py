# server/api/rest.py

from fastapi import APIRouter, Body, Depends, Path, Query, status
from api.deps import get_current_user, get_executor
from core.envelope import paginated, success
from core.errors import RecordNotFound
from core.executor import CrudExecutor, DEFAULT_LIMIT, DEFAULT_OFFSET


router = APIRouter(
    prefix="/api/rest",
    tags=["rest"],
    dependencies=[Depends(get_current_user)],
)

# Largest value SQLite can store as an INTEGER
MAX_SQL_INTEGER = 2**63 - 1


# -------------------------------
# Collection Endpoints
# -------------------------------

@router.get("/{table_name}")
def list_records(
    table_name: str,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_SQL_INTEGER),
    offset: int = Query(DEFAULT_OFFSET, ge=0, le=MAX_SQL_INTEGER),
    executor: CrudExecutor = Depends(get_executor),
):
    records, total = executor.list_records(table_name, limit, offset)
    return paginated(records, limit, offset, total)


@router.post("/{table_name}", status_code=status.HTTP_201_CREATED)
def create_record(
    table_name: str,
    data: dict = Body(...),
    executor: CrudExecutor = Depends(get_executor),
):
    return success(executor.insert(table_name, data))


# -------------------------------
# Single Record Endpoints
# -------------------------------

@router.get("/{table_name}/{record_id}")
def get_record(
    table_name: str,
    record_id: int = Path(ge=0, le=MAX_SQL_INTEGER),
    executor: CrudExecutor = Depends(get_executor),
):
    return success(executor.get_by_id(table_name, record_id))


@router.put("/{table_name}/{record_id}")
def update_record(
    table_name: str,
    record_id: int = Path(ge=0, le=MAX_SQL_INTEGER),
    data: dict = Body(...),
    executor: CrudExecutor = Depends(get_executor),
):
    return success(executor.update(table_name, record_id, data))


@router.delete("/{table_name}/{record_id}")
def delete_record(
    table_name: str,
    record_id: int = Path(ge=0, le=MAX_SQL_INTEGER),
    executor: CrudExecutor = Depends(get_executor),
):
    if not executor.delete(table_name, record_id):
        raise RecordNotFound()
    return success({"message": "Record deleted successfully"})
