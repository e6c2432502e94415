# server/api/deps.py

import logging
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from core.catalog import SchemaCatalog
from core.errors import NoToken
from core.executor import CrudExecutor
from core.raw_sql import RawSqlConsole
from core.security import CredentialService, SessionIdentity


logger = logging.getLogger(__name__)

# auto_error is off so a missing or non-Bearer header raises our own NoToken
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/token", auto_error=False)


def get_catalog(request: Request) -> SchemaCatalog:
    return request.app.state.catalog


def get_executor(request: Request) -> CrudExecutor:
    return request.app.state.executor


def get_raw_sql(request: Request) -> RawSqlConsole:
    return request.app.state.raw_sql


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    credentials: CredentialService = Depends(get_credentials),
) -> SessionIdentity:
    """
    Authentication gate for every data endpoint. The verified identity is
    also attached to request.state for the rest of the call.
    """
    if not token:
        logger.debug("Request without bearer token: %s %s", request.method, request.url.path)
        raise NoToken()

    identity = credentials.verify(token)
    request.state.identity = identity
    return identity
