"""Database initialization helpers."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db_models import AdPageModel, Base


def build_session_factory(database_url: str) -> tuple[Engine, sessionmaker[Session]]:
    engine = create_engine(database_url, future=True)
    return engine, sessionmaker(bind=engine, expire_on_commit=False)


def init_db(
    engine: Engine,
    session_factory: sessionmaker[Session],
    *,
    page_keys: Iterable[str] = (),
) -> None:
    """Create tables and seed page keys if the page table is empty."""
    Base.metadata.create_all(engine)

    with session_factory() as session:
        _seed_pages(session, page_keys)
        session.commit()


def _seed_pages(session: Session, page_keys: Iterable[str]) -> None:
    if session.query(AdPageModel).count():
        return
    for key in dict.fromkeys(page_keys):
        session.add(AdPageModel(key=key))
