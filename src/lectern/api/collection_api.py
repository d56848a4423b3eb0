"""Collection API: one presented page for a presenter and a base scope."""

from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..query.models import PaginationSettings, PresentedPage
from ..query.params import get_param, split_list
from ..query.strategies import QueryComposer
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..presenters.base import Presenter

logger = get_logger(__name__)


def present_collection(
    presenter: "Presenter",
    scope: Any,
    params: Optional[Mapping[str, Any]] = None,
    settings: Optional[PaginationSettings] = None,
) -> PresentedPage:
    """
    Compose and present one page of records.

    Args:
        presenter: Presenter for the records in ``scope``
        scope: Base QueryScope or SQLAlchemy Query
        params: Request parameters (page, per_page, search, order,
            fields, include, and any declared filter keys)
        settings: Pagination bounds; defaults apply if None

    Returns:
        PresentedPage with the pre-pagination count and presented results
    """
    params = dict(params or {})
    page = QueryComposer(presenter, params, settings).execute(scope)

    fields = split_list(get_param(params, "fields"))
    associations = presenter.requested_associations(get_param(params, "include"))
    results = presenter.group_present(page.records, fields, associations)
    logger.debug(
        f"{type(presenter).__name__}: presented {len(results)} of {page.total_count} "
        f"(page {page.page_number}, per_page {page.per_page})"
    )

    return PresentedPage(
        count=page.total_count,
        page=page.page_number,
        per_page=page.per_page,
        results=results,
    )
