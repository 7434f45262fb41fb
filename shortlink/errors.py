"""
Error taxonomy for shortlink.

Responsibilities:
    - Give every failure the HTTP layer must tell apart its own class
    - Tag each class with an `ErrorKind` so callers can dispatch on the tag
      instead of on identity
    - Carry the user-facing message separately from the diagnostic one

Kinds:
    VALIDATION         malformed input, rejected before storage is touched
    NOT_UNIQUE         auto-generated alias collided on the existence pre-check
    ALIAS_EXISTS       caller-supplied alias already present at insert time
    NOT_FOUND          alias absent on resolve/delete
    STORE_UNAVAILABLE  any persistence fault (connection, I/O, schema)

Only STORE_UNAVAILABLE is an operational incident; the rest are ordinary,
expected outcomes of a request.

LLM Prompt Example:
    "Show how a closed exception hierarchy with an enum tag lets an HTTP
    layer map domain failures to responses exhaustively."
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_UNIQUE = "not_unique"
    ALIAS_EXISTS = "alias_exists"
    NOT_FOUND = "not_found"
    STORE_UNAVAILABLE = "store_unavailable"


class ShortlinkError(Exception):
    """Base class for every error the mapping core raises to its callers."""

    kind: ErrorKind
    public_message: str = "internal error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidRequestError(ShortlinkError, ValueError):
    """Input rejected before any storage access (empty url, empty alias)."""

    kind = ErrorKind.VALIDATION
    public_message = "invalid request"

    def __init__(self, message: str = ""):
        super().__init__(message)
        # Validation messages are written for the caller, so expose them as-is.
        self.public_message = self.message


class AliasNotUniqueError(ShortlinkError):
    """The allocator's pre-check found every generated candidate taken."""

    kind = ErrorKind.NOT_UNIQUE
    public_message = "not unique alias"


class AliasExistsError(ShortlinkError):
    """A caller-supplied alias is already mapped."""

    kind = ErrorKind.ALIAS_EXISTS
    public_message = "alias already exists"

    def __init__(self, alias: str, message: str = ""):
        super().__init__(message or f"alias {alias!r} already exists")
        self.alias = alias


class NotFoundError(ShortlinkError):
    """No mapping exists for the alias."""

    kind = ErrorKind.NOT_FOUND
    public_message = "not found"

    def __init__(self, alias: str, message: str = ""):
        super().__init__(message or f"no url for alias {alias!r}")
        self.alias = alias


class StoreUnavailableError(ShortlinkError):
    """The persistence layer failed; the original exception is chained."""

    kind = ErrorKind.STORE_UNAVAILABLE
    public_message = "internal error"


class DuplicateAliasError(Exception):
    """
    Storage-level signal that an insert hit the alias unique constraint.

    Raised only by storage backends; `MappingService` translates it into
    `AliasExistsError`, so it never reaches the HTTP layer.
    """

    def __init__(self, alias: str):
        super().__init__(f"alias {alias!r} violates the unique constraint")
        self.alias = alias
