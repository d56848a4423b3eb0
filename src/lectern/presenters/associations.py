"""Resolve association placeholders for a single record."""

from typing import Any, Collection, Optional, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from ..utils.inflection import singularize
from .lookup_cache import LookupCache
from .markers import AssociationField, InlineResolver, LookupBacked, NamedAccessor

SEQUENCE_TYPES = (list, tuple, set, frozenset)


def record_identity(record: Any) -> Any:
    """Primary key of a mapped record, or its ``id`` attribute otherwise."""
    state = sa_inspect(record, raiseerr=False)
    if state is not None and getattr(state, "mapper", None) is not None:
        key = state.mapper.primary_key_from_instance(record)
        return key[0] if len(key) == 1 else tuple(key)
    return getattr(record, "id")


def is_record(value: Any) -> bool:
    state = sa_inspect(value, raiseerr=False)
    return state is not None and getattr(state, "mapper", None) is not None


def has_column(record: Any, attr: str) -> bool:
    """True when the record's schema exposes ``attr`` as a plain column."""
    try:
        mapper = sa_inspect(type(record))
    except NoInspectionAvailable:
        return hasattr(record, attr)
    return attr in mapper.column_attrs.keys()


def _reduce(value: Any) -> Any:
    return record_identity(value) if is_record(value) else value


def id_field(name: str, value: Any) -> Tuple[str, Any]:
    """Name and value of the output field for a resolved association."""
    if isinstance(value, SEQUENCE_TYPES):
        return f"{singularize(name)}_ids", [_reduce(item) for item in value]
    return f"{singularize(name)}_id", _reduce(value)


def _call_accessor(record: Any, method_name: str) -> Any:
    value = getattr(record, method_name)
    return value() if callable(value) else value


def resolve_association(
    record: Any,
    name: str,
    field: AssociationField,
    requested_associations: Collection[str],
    lookup_cache: LookupCache,
) -> Optional[Tuple[str, Any]]:
    """
    Resolve one association of one record.

    The first applicable path wins: the ``<accessor>_id`` column, then a
    batched lookup, then a direct accessor or closure. Returns None when
    the association was not requested and has no foreign-key column.

    Args:
        record: Record being presented
        name: Struct key holding the placeholder
        field: The placeholder
        requested_associations: Association names the caller asked for
        lookup_cache: Cache shared by the whole batch

    Returns:
        (output field name, value) or None
    """
    accessor = field.accessor_name
    if accessor and has_column(record, f"{accessor}_id"):
        return f"{name}_id", getattr(record, f"{accessor}_id")

    if name not in requested_associations:
        # Dropped without a diagnostic; callers only see the missing key.
        return None

    source = field.source
    if isinstance(source, LookupBacked):
        rid = record_identity(record)
        table = lookup_cache.fetch(name, [rid], source.fn)
        value = table.get(rid)
    elif isinstance(source, InlineResolver):
        value = source.fn(record)
    elif isinstance(source, NamedAccessor):
        value = _call_accessor(record, source.method_name)
    else:
        raise TypeError(f"Unknown association source: {source!r}")

    return id_field(name, value)
