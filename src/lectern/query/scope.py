"""Storage scope: a thin, immutable wrapper over a SQLAlchemy ``Query``.

Filter and sort declarations receive a QueryScope and return a new one.
Nothing here executes SQL except ``count``, ``ids`` and the fetch methods.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Query

from ..errors import ConfigurationError


class QueryScope:
    def __init__(self, query: Query, model: Optional[type] = None):
        self.query = query
        self.model = model or query.column_descriptions[0]["entity"]
        if self.model is None:
            raise ConfigurationError("QueryScope requires a query over a mapped class")

    @property
    def primary_key(self):
        pk = self.model.__mapper__.primary_key
        if len(pk) != 1:
            raise ConfigurationError(f"{self.model.__name__} must have a single-column primary key")
        return pk[0]

    def _derive(self, query: Query) -> "QueryScope":
        return QueryScope(query, self.model)

    def _column(self, field: str):
        column = getattr(self.model, field, None)
        if column is None:
            raise ConfigurationError(f"{self.model.__name__} has no column '{field}'")
        return column

    def where(self, *criterion) -> "QueryScope":
        return self._derive(self.query.filter(*criterion))

    def apply_filter(self, criteria: Dict[str, Any]) -> "QueryScope":
        """Equality filter per column name; list values become ``IN``."""
        query = self.query
        for field, value in criteria.items():
            column = self._column(field)
            if isinstance(value, (list, tuple, set)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return self._derive(query)

    def apply_order(self, field: str, direction: str) -> "QueryScope":
        column = self._column(field)
        clause = column.desc() if direction == "desc" else column.asc()
        return self._derive(self.query.order_by(clause))

    def unordered(self) -> "QueryScope":
        return self._derive(self.query.order_by(None))

    def restrict_to_ids(self, ids: Iterable[Any]) -> "QueryScope":
        return self._derive(self.query.filter(self.primary_key.in_(list(ids))))

    def limit_offset(self, limit: int, offset: int) -> "QueryScope":
        return self._derive(self.query.limit(limit).offset(offset))

    def count(self) -> int:
        return self.query.count()

    def ids(self) -> List[Any]:
        """Primary keys of the scope, in the scope's order."""
        return [row[0] for row in self.query.with_entities(self.primary_key).all()]

    def all(self) -> List[Any]:
        return self.query.all()

    def fetch_by_ids(self, ids: Iterable[Any]) -> List[Any]:
        """Records with the given ids. Order is not guaranteed."""
        ids = list(ids)
        if not ids:
            return []
        return self.unordered().restrict_to_ids(ids).query.all()


def as_scope(scope) -> QueryScope:
    if isinstance(scope, QueryScope):
        return scope
    if isinstance(scope, Query):
        return QueryScope(scope)
    raise TypeError(f"Expected a QueryScope or sqlalchemy Query, got {type(scope).__name__}")
