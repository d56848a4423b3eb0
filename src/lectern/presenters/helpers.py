"""Namespace helpers shared by the presenters of one namespace."""

from typing import Optional


class PresenterHelper:
    """
    Base class for per-namespace helper objects.

    A presenter holds its helper in ``self.helper`` and calls it directly,
    e.g. ``self.helper.avatar_url(user)``. Subclass and register one per
    namespace through PresenterRegistry.register_helper.
    """

    namespace: Optional[str] = None

    def __init__(self, namespace: Optional[str] = None):
        if namespace is not None:
            self.namespace = namespace
