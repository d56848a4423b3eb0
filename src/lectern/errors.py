"""Error taxonomy for presenters and query composition."""


class LecternError(Exception):
    """Base class for all lectern errors."""


class ConfigurationError(LecternError):
    """A presenter or declaration is misconfigured. Never retried."""


class InvalidRequestParameter(LecternError, ValueError):
    """A request parameter could not be honoured as given.

    Raised by the strict parsers only. Query composition catches it and
    falls back to defaults instead of failing the request.
    """

    def __init__(self, param: str, value, message: str | None = None):
        self.param = param
        self.value = value
        super().__init__(message or f"Invalid value for '{param}': {value!r}")
