"""
sql_store.py — DataHandle over SQLAlchemy.
There is no row-level policy engine underneath this backend; callers scope
every query themselves (see services/access.py).
"""
import logging
from datetime import date, datetime

from sqlalchemy import Date, DateTime, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database import import_models
from datastore import DataHandle, DataStore, split_filter
from errors import ConflictError, UpstreamError

logger = logging.getLogger(__name__)

# Columns kept out of API responses
PRIVATE_COLUMNS = {"pair_key", "hashed_password"}


def _is_unique_violation(err: IntegrityError) -> bool:
    orig = getattr(err, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(orig)


def _coerce(column, value):
    """Wire values are strings; Date/DateTime columns want Python objects."""
    if value is None or not isinstance(value, str):
        return value
    if isinstance(column.type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(column.type, Date):
        return date.fromisoformat(value)
    return value


def row_to_dict(obj) -> dict:
    row = {}
    for column in obj.__table__.columns:
        if column.name in PRIVATE_COLUMNS:
            continue
        value = getattr(obj, column.name)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        row[column.name] = value
    return row


class SqlHandle(DataHandle):
    def __init__(self, session_factory):
        self.session_factory = session_factory
        self.models = {m.__tablename__: m for m in import_models()}

    def _model(self, table: str):
        try:
            return self.models[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}")

    def _column(self, model, name: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise ValueError(f"Unknown column {model.__tablename__}.{name}")
        return column

    def _values(self, model, data: dict) -> dict:
        return {k: _coerce(self._column(model, k), v) for k, v in data.items()}

    def _query(self, session, model, filters: dict = None, any_of: list = None):
        query = session.query(model)
        for key, value in (filters or {}).items():
            name, op = split_filter(key)
            column = self._column(model, name)
            attr = getattr(model, name)
            if op == "eq":
                query = query.filter(attr == _coerce(column, value))
            elif op == "neq":
                query = query.filter(attr != _coerce(column, value))
            elif op == "in":
                query = query.filter(attr.in_([_coerce(column, v) for v in value]))
            elif op == "gte":
                query = query.filter(attr >= _coerce(column, value))
            elif op == "lte":
                query = query.filter(attr <= _coerce(column, value))
            elif op == "is":
                query = query.filter(attr.is_(value))
        if any_of:
            query = query.filter(or_(*[
                getattr(model, name) == _coerce(self._column(model, name), value)
                for name, value in any_of
            ]))
        return query

    def _write(self, action, session):
        try:
            result = action(session)
            session.commit()
            return result
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                raise ConflictError(str(e.orig)) from e
            raise UpstreamError(f"Integrity error: {e.orig}") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise UpstreamError(f"Database error: {e}") from e

    def select(self, table, filters=None, columns="*", order=None, desc=False, any_of=None):
        model = self._model(table)
        try:
            with self.session_factory() as session:
                query = self._query(session, model, filters, any_of)
                if order:
                    attr = getattr(model, order)
                    query = query.order_by(attr.desc() if desc else attr.asc())
                rows = [row_to_dict(obj) for obj in query.all()]
        except SQLAlchemyError as e:
            raise UpstreamError(f"Database error: {e}") from e
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        return rows

    def insert(self, table, data):
        model = self._model(table)

        def action(session):
            obj = model(**self._values(model, data))
            session.add(obj)
            session.flush()
            session.refresh(obj)
            return row_to_dict(obj)

        with self.session_factory() as session:
            return self._write(action, session)

    def upsert(self, table, data, on_conflict):
        model = self._model(table)
        values = self._values(model, data)

        def action(session):
            match = {k: values[k] for k in on_conflict}
            obj = session.query(model).filter_by(**match).first()
            if obj is None:
                obj = model(**values)
                session.add(obj)
            else:
                for k, v in values.items():
                    setattr(obj, k, v)
            session.flush()
            session.refresh(obj)
            return row_to_dict(obj)

        with self.session_factory() as session:
            return self._write(action, session)

    def update(self, table, filters, data):
        if not filters:
            raise ValueError("update() requires at least one filter")
        model = self._model(table)
        values = self._values(model, data)

        def action(session):
            objs = self._query(session, model, filters).all()
            for obj in objs:
                for k, v in values.items():
                    setattr(obj, k, v)
            session.flush()
            for obj in objs:
                session.refresh(obj)
            return [row_to_dict(obj) for obj in objs]

        with self.session_factory() as session:
            return self._write(action, session)

    def delete(self, table, filters):
        if not filters:
            raise ValueError("delete() requires at least one filter")
        model = self._model(table)

        def action(session):
            objs = self._query(session, model, filters).all()
            rows = [row_to_dict(obj) for obj in objs]
            for obj in objs:
                session.delete(obj)
            return rows

        with self.session_factory() as session:
            return self._write(action, session)


class SqlStore(DataStore):
    """Both handles share one unscoped SqlHandle."""

    def __init__(self, session_factory):
        self.handle = SqlHandle(session_factory)

    def scoped(self, access_token):
        return self.handle

    def admin(self):
        return self.handle
