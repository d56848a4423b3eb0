"""Explicit presenter registration, frozen into a read-only lookup table."""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Type

from ..errors import ConfigurationError
from ..utils.logging import get_logger
from .base import Presenter
from .helpers import PresenterHelper

logger = get_logger(__name__)

PRESENTER_SUFFIX = "Presenter"
ROOT_NAMESPACE = "root"


def presenter_key(presenter_cls: Type[Presenter]) -> tuple[str, str]:
    """
    Derive ``(namespace, entity)`` for a presenter class.

    ``api.v2.CheesePresenter`` -> ``("v2", "cheese")``. An explicit
    ``namespace`` class attribute wins over the module path.

    Raises:
        ConfigurationError: If the class name does not end in ``Presenter``
    """
    class_name = presenter_cls.__name__
    if not class_name.endswith(PRESENTER_SUFFIX) or class_name == PRESENTER_SUFFIX:
        raise ConfigurationError(
            f"Presenter class names must end in Presenter, i.e. '{class_name}Presenter'"
        )
    entity = class_name[: -len(PRESENTER_SUFFIX)].lower()

    namespace = presenter_cls.namespace
    if not namespace:
        module_parts = presenter_cls.__module__.split(".")
        namespace = module_parts[-2].lower() if len(module_parts) > 1 else ROOT_NAMESPACE
    return namespace, entity


class FrozenRegistry:
    """Read-only ``namespace -> entity -> presenter`` table."""

    def __init__(self, presenters: Dict[str, Dict[str, Presenter]]):
        self._presenters: Mapping[str, Mapping[str, Presenter]] = MappingProxyType(
            {ns: MappingProxyType(dict(entries)) for ns, entries in presenters.items()}
        )

    @property
    def namespaces(self) -> list[str]:
        return sorted(self._presenters)

    def lookup(self, namespace: str, entity: str) -> Presenter:
        try:
            return self._presenters[namespace][entity]
        except KeyError:
            raise KeyError(f"No presenter registered for {namespace}/{entity}") from None

    def get(self, namespace: str, entity: str) -> Optional[Presenter]:
        return self._presenters.get(namespace, {}).get(entity)

    def in_namespace(self, namespace: str) -> Mapping[str, Presenter]:
        return self._presenters.get(namespace, MappingProxyType({}))


class PresenterRegistry:
    """
    Collects presenters at startup.

    Usage:
        registry = PresenterRegistry()
        registry.register_helper(V2Helper(), namespace="v2")
        registry.register(CheesePresenter)
        presenters = registry.freeze()
        presenters.lookup("v2", "cheese")
    """

    def __init__(self):
        self._presenters: Dict[str, Dict[str, Presenter]] = {}
        self._helpers: Dict[str, PresenterHelper] = {}
        self._frozen = False

    def _check_open(self) -> None:
        if self._frozen:
            raise ConfigurationError("Registry is frozen; register presenters during startup")

    def register_helper(self, helper: PresenterHelper, namespace: Optional[str] = None) -> None:
        self._check_open()
        ns = namespace or helper.namespace
        if not ns:
            raise ConfigurationError("Helper registration requires a namespace")
        self._helpers[ns] = helper
        for presenter in self._presenters.get(ns, {}).values():
            presenter.helper = helper

    def register(self, presenter_cls: Type[Presenter]) -> Presenter:
        """Instantiate and register a presenter class. Returns the instance."""
        self._check_open()
        namespace, entity = presenter_key(presenter_cls)
        entries = self._presenters.setdefault(namespace, {})
        if entity in entries:
            raise ConfigurationError(f"Presenter already registered for {namespace}/{entity}")
        presenter = presenter_cls(helper=self._helpers.get(namespace))
        entries[entity] = presenter
        logger.debug(f"Registered {presenter_cls.__name__} as {namespace}/{entity}")
        return presenter

    def freeze(self) -> FrozenRegistry:
        self._frozen = True
        return FrozenRegistry(self._presenters)
