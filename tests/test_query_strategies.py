"""Tests for query composition: search/filter intersection, sorting and paging."""

import pytest

from lectern.presenters import Presenter
from lectern.query.models import PaginationSettings
from lectern.query.strategies import FilterAndSearch, FilterOrSearch, QueryComposer

from .models import Cheese

RANKED_IDS = [2, 3, 4, 5, 6, 8, 9, 10, 11, 12]


@pytest.fixture
def searchable_presenter(cheese_presenter_cls):
    searches = []

    def search(term, options):
        searches.append((term, options))
        return RANKED_IDS, 11

    cheese_presenter_cls.search(search)
    presenter = cheese_presenter_cls()
    presenter.searches = searches
    return presenter


@pytest.fixture
def params():
    return {"owned_by": "1", "per_page": 7, "page": 1, "search": "toot, otto, toot"}


def _ids(page):
    return [record.id for record in page.records]


def test_takes_the_intersection_of_search_and_filter_results(session, cheeses, searchable_presenter, params):
    """Test that filters narrow ranked ids without reordering them."""
    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert _ids(page) == [2, 3, 4, 5, 8, 10, 11]
    assert page.total_count == 7
    assert page.page_number == 1
    assert page.per_page == 7


def test_rank_order_survives_storage_fetch_order(session, cheeses, cheese_presenter_cls):
    """Test that records come back in rank order even when rank is not id order."""
    cheese_presenter_cls.search(lambda term, options: ([11, 2, 8, 5, 3, 10, 4], 7))
    params = {"owned_by": "1", "per_page": 7, "search": "brie"}

    page = QueryComposer(cheese_presenter_cls(), params).execute(session.query(Cheese))

    assert _ids(page) == [11, 2, 8, 5, 3, 10, 4]
    assert page.total_count == 7


def test_explicit_sort_orders_the_intersection(session, cheeses, searchable_presenter, params):
    """Test that a declared order in the request replaces rank order."""
    params["order"] = "id:desc"

    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert _ids(page) == [11, 10, 8, 5, 4, 3, 2]
    assert page.total_count == 7


def test_unknown_sort_keeps_rank_order_under_search(session, cheeses, searchable_presenter, params):
    params["order"] = "smelliness:desc"

    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert _ids(page) == [2, 3, 4, 5, 8, 10, 11]


def test_search_pagination_slices_the_intersection(session, cheeses, searchable_presenter, params):
    """Test that pages slice the intersected ids and the count covers all of them."""
    params.update(per_page=3, page=2)

    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert _ids(page) == [5, 8, 10]
    assert page.total_count == 7


def test_search_page_past_the_end_is_empty(session, cheeses, searchable_presenter, params):
    params.update(per_page=3, page=4)

    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 7


def test_empty_search_result_is_an_empty_page(session, cheeses, cheese_presenter_cls):
    """Test that no ranked ids gives an empty page and a zero count, not an error."""
    cheese_presenter_cls.search(lambda term, options: ([], 0))

    page = QueryComposer(cheese_presenter_cls(), {"search": "nothing"}).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 0


def test_search_drops_ids_missing_from_storage(session, cheeses, cheese_presenter_cls):
    cheese_presenter_cls.search(lambda term, options: ([12, 99, 1, 12], 3))

    page = QueryComposer(cheese_presenter_cls(), {"search": "x"}).execute(session.query(Cheese))

    assert _ids(page) == [12, 1]
    assert page.total_count == 2


def test_search_receives_term_and_batch_options(session, cheeses, searchable_presenter, params):
    QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    term, options = searchable_presenter.searches[0]
    assert term == "toot, otto, toot"
    assert options["per_page"] == 500
    assert options["page"] == 1


def test_search_per_page_respects_filter_and_search_bound(session, cheeses, searchable_presenter, params):
    """Test that searching clamps per_page to the smaller search bound."""
    settings = PaginationSettings(default_max_filter_and_search_page=5)

    page = QueryComposer(searchable_presenter, params, settings).execute(session.query(Cheese))

    assert page.per_page == 5
    assert _ids(page) == [2, 3, 4, 5, 8]
    assert page.total_count == 7


def test_search_errors_propagate(session, cheeses, cheese_presenter_cls):
    """Test that a failing search backend fails the request without a partial page."""

    def broken(term, options):
        raise ConnectionError("search cluster unavailable")

    cheese_presenter_cls.search(broken)

    with pytest.raises(ConnectionError):
        QueryComposer(cheese_presenter_cls(), {"search": "x"}).execute(session.query(Cheese))


def test_strategy_selection(searchable_presenter):
    class PlainPresenter(Presenter):
        pass

    assert isinstance(QueryComposer(searchable_presenter, {"search": "x"}).strategy(), FilterAndSearch)
    assert isinstance(QueryComposer(searchable_presenter, {}).strategy(), FilterOrSearch)
    assert isinstance(QueryComposer(PlainPresenter(), {"search": "x"}).strategy(), FilterOrSearch)


def test_search_term_without_declared_search_is_ignored(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"search": "x", "per_page": 3}).execute(session.query(Cheese))

    assert _ids(page) == [12, 11, 10]
    assert page.total_count == 12


def test_filter_without_search_uses_default_sort_and_counts_filtered_scope(session, cheeses, cheese_presenter):
    """Test that storage-side paging keeps the count of the whole filtered scope."""
    page = QueryComposer(cheese_presenter, {"owned_by": "1", "per_page": 4}).execute(session.query(Cheese))

    assert _ids(page) == [11, 10, 8, 7]
    assert page.total_count == 9


def test_explicit_sort_without_search(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"order": "id:asc", "per_page": 3, "page": 2}).execute(session.query(Cheese))

    assert _ids(page) == [4, 5, 6]
    assert page.total_count == 12


def test_callable_sort_order(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"order": "flavor:asc", "per_page": 2}).execute(session.query(Cheese))

    assert _ids(page) == [1, 2]


def test_unknown_sort_falls_back_to_default(session, cheeses, cheese_presenter):
    """Test that an undeclared sort name gives the same order as no sort."""
    default = QueryComposer(cheese_presenter, {}).execute(session.query(Cheese))
    unknown = QueryComposer(cheese_presenter, {"order": "smelliness:asc"}).execute(session.query(Cheese))

    assert _ids(unknown) == _ids(default)
    assert _ids(default)[:3] == [12, 11, 10]


def test_invalid_direction_falls_back_to_default(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"order": "id:sideways", "per_page": 2}).execute(session.query(Cheese))

    assert _ids(page) == [12, 11]


@pytest.mark.parametrize(
    "params,expected_page,expected_per_page",
    [
        ({}, 1, 20),
        ({"per_page": 1000}, 1, 200),
        ({"per_page": 0}, 1, 1),
        ({"per_page": "abc", "page": "-3"}, 1, 20),
        ({"per_page": "5", "page": "2"}, 2, 5),
    ],
)
def test_pagination_is_clamped(session, cheeses, cheese_presenter, params, expected_page, expected_per_page):
    """Test that out-of-range or malformed paging falls back to bounds."""
    page = QueryComposer(cheese_presenter, params).execute(session.query(Cheese))

    assert page.page_number == expected_page
    assert page.per_page == expected_per_page
    assert len(page.records) <= page.per_page


def test_page_past_the_end_without_search(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"page": 5, "per_page": 5}).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 12


def test_huge_page_without_search_is_empty(session, cheeses, cheese_presenter):
    """Test that a page far past the end never reaches storage as an offset."""
    page = QueryComposer(cheese_presenter, {"page": 10**18, "per_page": 20}).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 12
    assert page.page_number == 10**18


def test_huge_page_with_search_is_empty(session, cheeses, searchable_presenter, params):
    params.update(page=10**18)

    page = QueryComposer(searchable_presenter, params).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 7


def test_empty_filtered_scope_without_search(session, cheeses, cheese_presenter):
    page = QueryComposer(cheese_presenter, {"owned_by": "3"}).execute(session.query(Cheese))

    assert page.records == []
    assert page.total_count == 0


def test_filter_default_applies_when_param_missing(session, cheeses, cheese_presenter_cls):
    cheese_presenter_cls.filter("owned_by", lambda scope, user_id: scope.where(Cheese.user_id == int(user_id)), default="2")

    page = QueryComposer(cheese_presenter_cls(), {}).execute(session.query(Cheese))

    assert _ids(page) == [12, 9, 6]


def test_column_filter_without_callable(session, cheeses, cheese_presenter_cls):
    cheese_presenter_cls.filter("user_id")

    page = QueryComposer(cheese_presenter_cls(), {"user_id": 2, "order": "id:asc"}).execute(session.query(Cheese))

    assert _ids(page) == [6, 9, 12]


def test_boolean_filter_values_are_coerced(session, cheeses, cheese_presenter_cls):
    seen = []

    def only_jane(scope, value):
        seen.append(value)
        return scope.where(Cheese.user_id == 2) if value is True else scope

    cheese_presenter_cls.filter("only_jane", only_jane)

    page = QueryComposer(cheese_presenter_cls(), {"only_jane": "true"}).execute(session.query(Cheese))

    assert seen == [True]
    assert page.total_count == 3
