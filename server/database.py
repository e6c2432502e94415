# server/database.py

import os
import logging
from fastapi import Request
from sqlalchemy import create_engine, event, select, func
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from models import Base, AdminUser
from models.user import BOOTSTRAP_ADMIN_USERNAME


logger = logging.getLogger(__name__)


def create_db_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    path = make_url(url).database
    if path and path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    engine = create_engine(url, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine, admin_password: str, hash_password):
    """
    Creates the reserved tables if they are missing and recovers the
    bootstrap admin account when no administrator exists.
    """
    Base.metadata.create_all(bind=engine)

    SessionLocal = create_session_factory(engine)
    with SessionLocal() as db:
        count = db.scalar(select(func.count()).select_from(AdminUser))
        if count == 0:
            db.add(AdminUser(
                username=BOOTSTRAP_ADMIN_USERNAME,
                password_hash=hash_password(admin_password),
            ))
            db.commit()
            logger.info("Default admin user created: %s", BOOTSTRAP_ADMIN_USERNAME)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
