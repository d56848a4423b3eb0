"""Presenters: turn records into API-shaped structures.

Key rules:

1. A presenter never mutates the records it presents
2. Association lookups are batched through one LookupCache per batch
3. Optional fields are computed only when requested
4. Temporal values leave as ``YYYY-MM-DD`` strings or epoch seconds
"""

from .base import Presenter
from .helpers import PresenterHelper
from .lookup_cache import LookupCache
from .markers import AssociationField, OptionalField, association, optional_field
from .registry import FrozenRegistry, PresenterRegistry

__all__ = [
    "AssociationField",
    "FrozenRegistry",
    "LookupCache",
    "OptionalField",
    "Presenter",
    "PresenterHelper",
    "PresenterRegistry",
    "association",
    "optional_field",
]
