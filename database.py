from typing import Generator

from sqlmodel import SQLModel, create_engine, Session

from core.config import settings

DATABASE_URL = settings.DATABASE_URL.strip()

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables() -> None:
    # Table models must be imported so they register on SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def ping_database() -> dict:
    try:
        with Session(engine) as session:
            session.connection().exec_driver_sql("SELECT 1")
        return {"service": "Database", "status": "ok"}
    except Exception as e:
        return {"service": "Database", "status": "error", "detail": str(e)}
