from collections.abc import Generator
from datetime import datetime

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from civicsense.db.session import SessionLocal
from civicsense.services.schedule_store import ScheduleStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(
    db: Session = Depends(get_db),
    x_actor: str | None = Header(default=None, max_length=200),
) -> ScheduleStore:
    # Identity is resolved upstream; the gateway forwards it as X-Actor.
    return ScheduleStore(db, actor=x_actor)


def get_now() -> datetime:
    """Local wall-clock "now"; overridden in tests to pin the reference instant."""
    return datetime.now()
