"""Placeholder values a presenter leaves in a struct for post-processing."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ..errors import ConfigurationError


@dataclass(frozen=True)
class NamedAccessor:
    """Read the association through an attribute or method of the record."""
    method_name: str


@dataclass(frozen=True)
class InlineResolver:
    """Compute the association with a closure taking the record."""
    fn: Callable[[Any], Any]


@dataclass(frozen=True)
class LookupBacked:
    """Compute the association for a whole batch at once.

    ``fn`` receives every record id in the batch and returns a mapping of
    record id to value.
    """
    fn: Callable[[Iterable[Any]], Dict[Any, Any]]


AssociationSource = Union[NamedAccessor, InlineResolver, LookupBacked]


@dataclass(frozen=True)
class AssociationField:
    """Marks a struct field as an association resolved after ``present``."""
    source: AssociationSource

    @property
    def accessor_name(self) -> Optional[str]:
        """Accessor usable for the foreign-key shortcut, if any."""
        if isinstance(self.source, NamedAccessor):
            return self.source.method_name
        return None


class OptionalField:
    """Deferred computation kept only when its field is requested."""

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[], Any]):
        if not callable(fn):
            raise ConfigurationError("optional_field requires a callable")
        self.fn = fn

    def compute(self) -> Any:
        return self.fn()

    def __repr__(self) -> str:
        return f"OptionalField({self.fn!r})"


def association(
    name: Optional[str] = None,
    *,
    via: Optional[str] = None,
    dynamic: Optional[Callable[[Any], Any]] = None,
    lookup: Optional[Callable[[Iterable[Any]], Dict[Any, Any]]] = None,
) -> AssociationField:
    """
    Build an association placeholder.

    Args:
        name: Accessor on the record, also used for the ``<name>_id`` shortcut
        via: Accessor to call instead of ``name``
        dynamic: Closure ``record -> value``
        lookup: Batch closure ``ids -> {id: value}``

    Returns:
        AssociationField with exactly one resolution source

    Raises:
        ConfigurationError: If no accessor name and no closure was given
    """
    if lookup is not None:
        return AssociationField(LookupBacked(lookup))
    if dynamic is not None:
        return AssociationField(InlineResolver(dynamic))
    accessor = via or name
    if not accessor:
        raise ConfigurationError("Association requires a method name, a dynamic closure or a lookup")
    return AssociationField(NamedAccessor(accessor))


def optional_field(fn: Callable[[], Any]) -> OptionalField:
    return OptionalField(fn)
