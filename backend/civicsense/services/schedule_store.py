from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicsense.core.exceptions import ResourceNotFoundError, ScheduleValidationError, StoreUnavailableError
from civicsense.models.schedule_item import ScheduleItem
from civicsense.schemas.schedule import ScheduleItemCreate, ScheduleItemUpdate
from civicsense.services.audit import log_activity

logger = logging.getLogger(__name__)


class ScheduleStore:
    """SQLAlchemy-backed persistence for schedule items.

    The timetable engine only ever sees the materialized lists this store
    returns. Database failures are raised as ``StoreUnavailableError`` and
    are never retried here.
    """

    def __init__(self, db: Session, *, actor: str | None = None) -> None:
        self.db = db
        self.actor = actor

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Schedule store failed to %s", operation)
            raise StoreUnavailableError(operation) from exc

    def _filtered(
        self,
        query: Select,
        scope: str | None,
        start_date: datetime | None,
        end_date: datetime | None,
        is_recurring: bool | None,
    ) -> Select:
        if scope:
            query = query.where(ScheduleItem.scope == scope)
        if start_date is not None:
            query = query.where(ScheduleItem.start_time >= start_date)
        if end_date is not None:
            query = query.where(ScheduleItem.end_time <= end_date)
        if is_recurring is not None:
            query = query.where(ScheduleItem.is_recurring.is_(is_recurring))
        return query

    def list(
        self,
        scope: str | None = None,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        is_recurring: bool | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[ScheduleItem]:
        query = self._filtered(select(ScheduleItem), scope, start_date, end_date, is_recurring)
        query = query.order_by(ScheduleItem.start_time.asc(), ScheduleItem.id.asc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        with self._guard("list schedules"):
            return list(self.db.execute(query).scalars())

    def count(
        self,
        scope: str | None = None,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        is_recurring: bool | None = None,
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(ScheduleItem), scope, start_date, end_date, is_recurring
        )
        with self._guard("count schedules"):
            return int(self.db.execute(query).scalar_one())

    def get(self, item_id: str) -> ScheduleItem:
        with self._guard("fetch schedule"):
            item = self.db.get(ScheduleItem, item_id)
        if item is None:
            raise ResourceNotFoundError("Schedule", item_id)
        return item

    def create(self, data: ScheduleItemCreate) -> ScheduleItem:
        item = ScheduleItem(**data.model_dump())
        with self._guard("create schedule"):
            self.db.add(item)
            self.db.flush()
            log_activity(
                self.db,
                actor=self.actor,
                action="schedule.create",
                entity_type="schedule",
                entity_id=item.id,
                scope=item.scope,
                details={"title": item.title, "start_time": item.start_time.isoformat()},
            )
            self.db.commit()
            self.db.refresh(item)
        logger.info("Created schedule %s in scope %s", item.id, item.scope)
        return item

    def update(self, item_id: str, patch: ScheduleItemUpdate) -> ScheduleItem:
        item = self.get(item_id)
        data = patch.model_dump(exclude_unset=True)

        start_time = data.get("start_time", item.start_time)
        end_time = data.get("end_time", item.end_time)
        if end_time <= start_time:
            raise ScheduleValidationError(
                "end_time must be after start_time",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
            )

        for key, value in data.items():
            setattr(item, key, value)
        if not item.is_recurring:
            item.recurrence_pattern = None

        with self._guard("update schedule"):
            log_activity(
                self.db,
                actor=self.actor,
                action="schedule.update",
                entity_type="schedule",
                entity_id=item_id,
                scope=item.scope,
                details={key: _jsonable(value) for key, value in data.items()},
            )
            self.db.commit()
            self.db.refresh(item)
        return item

    def delete(self, item_id: str) -> None:
        item = self.get(item_id)
        with self._guard("delete schedule"):
            self.db.delete(item)
            log_activity(
                self.db,
                actor=self.actor,
                action="schedule.delete",
                entity_type="schedule",
                entity_id=item_id,
                scope=item.scope,
                details={"title": item.title},
            )
            self.db.commit()
        logger.info("Deleted schedule %s", item_id)

    def calendar(self, start: datetime, end: datetime, scope: str | None = None) -> list[ScheduleItem]:
        return self.list(scope, start_date=start, end_date=end)

    def upcoming(
        self,
        now: datetime,
        *,
        limit: int = 10,
        days: int = 7,
        scope: str | None = None,
    ) -> list[ScheduleItem]:
        horizon = now + timedelta(days=days)
        query = select(ScheduleItem).where(
            ScheduleItem.start_time >= now,
            ScheduleItem.start_time <= horizon,
        )
        if scope:
            query = query.where(ScheduleItem.scope == scope)
        query = query.order_by(ScheduleItem.start_time.asc()).limit(limit)
        with self._guard("list upcoming schedules"):
            return list(self.db.execute(query).scalars())


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value
