"""Query strategies: pick, order and count the records for one page.

Two strategies share the pagination rules:

- FilterOrSearch: no search term. Filters, sort and LIMIT/OFFSET all run
  in storage, and the count runs on the filtered scope.
- FilterAndSearch: a search term and a declared search. The search ranks
  ids, filters narrow them, and rank order survives the intersection
  unless the request names an explicit, declared sort.

QueryComposer chooses between them.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..errors import InvalidRequestParameter
from ..presenters.associations import record_identity
from ..utils.logging import get_logger
from .models import Page, PaginationSettings
from .params import clamp, get_param, parse_int, search_term
from .scope import QueryScope, as_scope

if TYPE_CHECKING:
    from ..presenters.base import Presenter

logger = get_logger(__name__)


class BaseStrategy:
    searching = False

    def __init__(
        self,
        presenter: "Presenter",
        params: Optional[Mapping[str, Any]] = None,
        settings: Optional[PaginationSettings] = None,
    ):
        self.presenter = presenter
        self.params = dict(params or {})
        self.settings = settings or PaginationSettings()

    def _int_param(self, name: str, default: int) -> int:
        raw = get_param(self.params, name)
        if raw is None:
            return default
        try:
            return parse_int(name, raw)
        except InvalidRequestParameter as e:
            logger.warning(f"{e}; using {default}")
            return default

    def calculate_page(self) -> int:
        page = self._int_param("page", 1)
        if page < 1:
            logger.debug(f"page={page} below 1; clamping")
        return max(page, 1)

    def calculate_per_page(self) -> int:
        per_page = self._int_param("per_page", self.settings.default_per_page)
        upper = self.settings.default_max_per_page
        if self.searching:
            upper = min(upper, self.settings.default_max_filter_and_search_page)
        clamped = clamp(per_page, 1, upper)
        if clamped != per_page:
            logger.debug(f"per_page={per_page} clamped to {clamped}")
        return clamped

    def execute(self, scope) -> Page:
        raise NotImplementedError


class FilterOrSearch(BaseStrategy):
    """Everything in storage: filter, count, order, LIMIT/OFFSET."""

    def execute(self, scope) -> Page:
        page = self.calculate_page()
        per_page = self.calculate_per_page()

        filtered = self.presenter.apply_filters_to_scope(as_scope(scope), self.params)
        total_count = filtered.count()
        offset = (page - 1) * per_page
        if offset >= total_count:
            return Page(records=[], total_count=total_count, page_number=page, per_page=per_page)

        ordered = self.presenter.apply_ordering_to_scope(filtered, self.params)
        records = ordered.limit_offset(per_page, offset).all()

        return Page(records=records, total_count=total_count, page_number=page, per_page=per_page)


class FilterAndSearch(BaseStrategy):
    """Intersect ranked search ids with the filtered scope."""

    searching = True

    def search_options(self) -> Dict[str, Any]:
        return {
            "per_page": self.settings.default_max_filter_and_search_page,
            "page": 1,
            "order": get_param(self.params, "order"),
            "params": self.params,
        }

    def ordered_matching_ids(self, scope: QueryScope, ranked_ids: List[Any]) -> List[Any]:
        filtered = self.presenter.apply_filters_to_scope(scope.restrict_to_ids(ranked_ids), self.params)

        if self.presenter.requested_sort(self.params) is not None:
            return self.presenter.apply_ordering_to_scope(filtered, self.params).ids()

        matching = set(filtered.ids())
        ordered: List[Any] = []
        seen = set()
        for record_id in ranked_ids:
            if record_id in matching and record_id not in seen:
                ordered.append(record_id)
                seen.add(record_id)
        return ordered

    def execute(self, scope) -> Page:
        scope = as_scope(scope)
        page = self.calculate_page()
        per_page = self.calculate_per_page()
        term = search_term(self.params)

        ranked_ids, total_search_matches = self.presenter.run_search(term, self.search_options())
        logger.debug(f"Search '{term}' ranked {len(ranked_ids)} of {total_search_matches} matches")
        if not ranked_ids:
            return Page(records=[], total_count=0, page_number=page, per_page=per_page)

        ordered_ids = self.ordered_matching_ids(scope, ranked_ids)
        offset = (page - 1) * per_page
        page_ids = ordered_ids[offset:offset + per_page]

        by_id = {record_identity(record): record for record in scope.fetch_by_ids(page_ids)}
        records = [by_id[record_id] for record_id in page_ids if record_id in by_id]

        return Page(records=records, total_count=len(ordered_ids), page_number=page, per_page=per_page)


class QueryComposer:
    """
    Entry point: ``QueryComposer(presenter, params).execute(scope) -> Page``.

    Search runs only when the request has a ``search`` term and the
    presenter declares a search; otherwise the term is ignored.
    """

    def __init__(
        self,
        presenter: "Presenter",
        params: Optional[Mapping[str, Any]] = None,
        settings: Optional[PaginationSettings] = None,
    ):
        self.presenter = presenter
        self.params = dict(params or {})
        self.settings = settings or PaginationSettings()

    def strategy(self) -> BaseStrategy:
        if search_term(self.params) is not None:
            if self.presenter.has_search():
                return FilterAndSearch(self.presenter, self.params, self.settings)
            logger.warning(f"{type(self.presenter).__name__} declares no search; ignoring search term")
        return FilterOrSearch(self.presenter, self.params, self.settings)

    def execute(self, scope) -> Page:
        return self.strategy().execute(scope)
