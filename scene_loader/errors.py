from __future__ import annotations


class LoaderError(Exception):
    """Base class for every stage failure of a load session."""

    stage = "session"


class FetchError(LoaderError):
    stage = "fetch"


class TransportError(FetchError):
    pass


class HttpError(FetchError):
    def __init__(self, code: int, message: str | None = None):
        self.code = code
        super().__init__(message or f"HTTP status {code}")


class DecodeError(LoaderError):
    stage = "decode"


class EmptySceneError(LoaderError):
    """The payload parsed but produced nothing renderable. Not a failure."""

    stage = "decode"


class RigNotFoundError(LoaderError):
    stage = "attach"


class ImmersiveInitError(LoaderError):
    stage = "immersive_init"


class SessionBusyError(LoaderError):
    stage = "session"
