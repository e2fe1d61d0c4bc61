"""Generic repository over the gym tables.

Criteria are plain SQLAlchemy boolean expressions, e.g.
``repo.list_where(Appointment.trainer_id == 3)``. Every read is conjoined
with ``is_active`` unless ``include_inactive=True`` is passed, so
soft-deleted rows never leak into conflict checks or listings.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy.orm import Query, Session

from gym_backend.database import Base

ModelType = TypeVar("ModelType", bound=Base)


def active(model: Type[ModelType]) -> Any:
    return model.is_active.is_(True)


class Repository(Generic[ModelType]):
    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def _query(self, criteria: Sequence[Any], include_inactive: bool) -> Query:
        query = self.db.query(self.model)
        if not include_inactive:
            query = query.filter(active(self.model))
        if criteria:
            query = query.filter(*criteria)
        return query

    def get_by_id(
        self, entity_id: int, *, include_inactive: bool = False, for_update: bool = False
    ) -> Optional[ModelType]:
        return self.get_first_where(
            self.model.id == entity_id,
            include_inactive=include_inactive,
            for_update=for_update,
        )

    def list_all(self, *, order_by: Any = None, include_inactive: bool = False) -> list[ModelType]:
        return self.list_where(order_by=order_by, include_inactive=include_inactive)

    def list_where(
        self, *criteria: Any, order_by: Any = None, include_inactive: bool = False
    ) -> list[ModelType]:
        query = self._query(criteria, include_inactive)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def query_where(
        self, *criteria: Any, include_inactive: bool = False, for_update: bool = False
    ) -> Query:
        query = self._query(criteria, include_inactive)
        if for_update:
            # Row lock held until the session commits or rolls back. SQLite drops the
            # clause; see database.enable_sqlite_write_locking.
            query = query.with_for_update()
        return query

    def get_first_where(
        self, *criteria: Any, include_inactive: bool = False, for_update: bool = False
    ) -> Optional[ModelType]:
        return self.query_where(*criteria, include_inactive=include_inactive, for_update=for_update).first()

    def exists_where(self, *criteria: Any, include_inactive: bool = False) -> bool:
        return self.db.query(
            self._query(criteria, include_inactive).exists()
        ).scalar()

    def add(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
