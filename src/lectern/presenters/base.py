"""Presenter base class: declarations plus the batch presentation pipeline."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Collection, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError, InvalidRequestParameter
from ..query.params import DEFAULT_SORT_ORDER, coerce_filter_value, get_param, parse_order, split_list
from ..query.scope import QueryScope
from ..utils.logging import get_logger
from . import markers
from .associations import record_identity, resolve_association
from .lookup_cache import LookupCache
from .post_process import process_fields

logger = get_logger(__name__)

SortOrder = str | Callable[[QueryScope, str], QueryScope]
SearchFn = Callable[[str, Dict[str, Any]], Tuple[Sequence[Any], int]]


@dataclass(frozen=True)
class FilterDeclaration:
    name: str
    fn: Optional[Callable[[QueryScope, Any], QueryScope]] = None
    default: Any = None


class Presenter:
    """
    Base class for presenters.

    Subclasses override ``present(record)`` and return a dict. Values may be
    ``self.association(...)`` or ``self.optional_field(...)`` placeholders;
    ``group_present`` resolves them for the whole batch.

    Declarations (call once at startup):
        CheesePresenter.sort_order("id", "id")
        CheesePresenter.filter("owned_by", lambda scope, user_id: scope.where(...))
        CheesePresenter.search(lambda term, options: ([3, 1, 2], 3))
    """

    namespace: Optional[str] = None
    default_sort_order: Optional[str] = None
    allowed_includes: Optional[Dict[str, str]] = None

    _sort_orders: Dict[str, SortOrder] = {}
    _filters: Dict[str, FilterDeclaration] = {}
    _search: Optional[SearchFn] = None

    def __init__(self, helper=None):
        self.helper = helper

    # -- declarations --------------------------------------------------------

    @classmethod
    def _own(cls, attr: str) -> dict:
        # Copy the inherited table so declarations never leak to siblings.
        if attr not in cls.__dict__:
            setattr(cls, attr, dict(getattr(cls, attr)))
        return cls.__dict__[attr]

    @classmethod
    def sort_order(cls, name: str, order: SortOrder) -> None:
        """Declare a sort: a column name or ``(scope, direction) -> scope``."""
        cls._own("_sort_orders")[name] = order

    @classmethod
    def filter(cls, name: str, fn: Optional[Callable[[QueryScope, Any], QueryScope]] = None, default: Any = None) -> None:
        """Declare a filter. Without ``fn`` it is an equality filter on the column ``name``."""
        cls._own("_filters")[name] = FilterDeclaration(name=name, fn=fn, default=default)

    @classmethod
    def search(cls, fn: SearchFn) -> None:
        cls._search = staticmethod(fn)

    @classmethod
    def sort_orders(cls) -> Mapping[str, SortOrder]:
        return MappingProxyType(cls._sort_orders)

    @classmethod
    def filters(cls) -> Mapping[str, FilterDeclaration]:
        return MappingProxyType(cls._filters)

    @classmethod
    def has_search(cls) -> bool:
        return cls._search is not None

    # -- struct building -----------------------------------------------------

    association = staticmethod(markers.association)
    optional_field = staticmethod(markers.optional_field)

    def present(self, record: Any) -> Dict[str, Any]:
        raise ConfigurationError(
            f"Please override present(record) in {type(self).__name__}"
        )

    def custom_preload(self, records: Sequence[Any], fields: Collection[str] = (), associations: Collection[str] = ()) -> None:
        """Hook to warm caches for a whole batch. Default does nothing."""

    # -- pipeline ------------------------------------------------------------

    def group_present(
        self,
        records: Iterable[Any],
        fields: Collection[str] = (),
        associations: Collection[str] = (),
    ) -> List[Dict[str, Any]]:
        """
        Present and post-process a batch of records.

        Args:
            records: Records in output order
            fields: Optional field names to include
            associations: Association names to resolve

        Returns:
            One dict per record, same order as ``records``

        Raises:
            ConfigurationError: If ``present`` is not overridden
        """
        if type(self).present is Presenter.present:
            raise ConfigurationError(
                f"Please override present(record) in {type(self).__name__}"
            )
        records = list(records)
        fields = set(fields)
        associations = set(associations)

        self.custom_preload(records, fields, associations)
        lookup_cache = LookupCache(record_identity(record) for record in records)
        return [
            self.present_and_post_process(record, fields, associations, lookup_cache)
            for record in records
        ]

    def present_and_post_process(
        self,
        record: Any,
        fields: Collection[str] = (),
        associations: Collection[str] = (),
        lookup_cache: Optional[LookupCache] = None,
    ) -> Dict[str, Any]:
        if lookup_cache is None:
            lookup_cache = LookupCache([record_identity(record)])
        return self.post_process(self.present(record), record, fields, associations, lookup_cache)

    def post_process(
        self,
        struct: Dict[str, Any],
        record: Any,
        fields: Collection[str],
        associations: Collection[str],
        lookup_cache: LookupCache,
    ) -> Dict[str, Any]:
        self.load_associations(record, struct, associations, lookup_cache)
        return process_fields(struct, fields)

    def load_associations(
        self,
        record: Any,
        struct: Dict[str, Any],
        associations: Collection[str],
        lookup_cache: LookupCache,
    ) -> None:
        for key, value in list(struct.items()):
            if not isinstance(value, markers.AssociationField):
                continue
            del struct[key]
            resolved = resolve_association(record, key, value, associations, lookup_cache)
            if resolved is not None:
                field_name, field_value = resolved
                struct[field_name] = field_value

    def requested_associations(self, includes: Any) -> List[str]:
        """Map requested include names through ``allowed_includes``; unknown names are dropped."""
        names = split_list(includes)
        if self.allowed_includes is None:
            return names
        allowed = []
        for name in names:
            if name in self.allowed_includes:
                allowed.append(self.allowed_includes[name])
            else:
                logger.debug(f"{type(self).__name__}: include '{name}' not allowed, ignoring")
        return allowed

    # -- scopes --------------------------------------------------------------

    def apply_filters_to_scope(self, scope: QueryScope, params: Mapping[str, Any]) -> QueryScope:
        for name, declaration in self.filters().items():
            value = get_param(params, name, declaration.default)
            if value is None:
                continue
            value = coerce_filter_value(value)
            if declaration.fn is not None:
                scope = declaration.fn(scope, value)
            else:
                scope = scope.apply_filter({name: value})
        return scope

    def requested_sort(self, params: Mapping[str, Any]) -> Optional[Tuple[str, str]]:
        """The explicitly requested sort if it is valid and declared, else None."""
        requested = get_param(params, "order")
        if requested is None:
            return None
        try:
            name, direction = parse_order(requested)
        except InvalidRequestParameter as e:
            logger.warning(f"{type(self).__name__}: {e}; using default sort order")
            return None
        if name not in self.sort_orders():
            logger.warning(f"{type(self).__name__}: unknown sort order '{name}'; using default sort order")
            return None
        return name, direction

    def default_sort(self) -> Optional[Tuple[str, str]]:
        try:
            name, direction = parse_order(self.default_sort_order or DEFAULT_SORT_ORDER)
        except InvalidRequestParameter as e:
            raise ConfigurationError(f"{type(self).__name__}.default_sort_order is invalid: {e}") from e
        if name not in self.sort_orders():
            logger.debug(f"{type(self).__name__}: default sort '{name}' not declared; leaving scope unordered")
            return None
        return name, direction

    def apply_ordering_to_scope(self, scope: QueryScope, params: Mapping[str, Any]) -> QueryScope:
        sort = self.requested_sort(params) or self.default_sort()
        if sort is None:
            return scope
        name, direction = sort
        order = self.sort_orders()[name]
        if callable(order):
            return order(scope, direction)
        return scope.apply_order(order, direction)

    def run_search(self, term: str, options: Dict[str, Any]) -> Tuple[List[Any], int]:
        """Call the declared search. Errors from the search backend propagate."""
        if self._search is None:
            raise ConfigurationError(f"{type(self).__name__} does not declare a search")
        ranked_ids, total = self._search(term, options)
        return list(ranked_ids or []), int(total or 0)
