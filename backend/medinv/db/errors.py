"""
Translation of driver errors into a closed set of storage error kinds.

This is the only module that looks at driver-specific error codes and
messages (MySQL errno, PostgreSQL SQLSTATE, SQLite message text). Everything
above the storage boundary sees StorageError.kind.
"""
import enum
import logging

from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)


class StorageErrorKind(str, enum.Enum):
    DUPLICATE_KEY = "duplicate_key"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"
    CHECK = "check"
    CONFLICT = "conflict"  # deadlock, lock wait timeout, database locked
    CONNECTION_LIMIT = "connection_limit"
    UNAVAILABLE = "unavailable"
    OTHER = "other"


class StorageError(Exception):
    def __init__(self, kind: StorageErrorKind, message: str, original: BaseException | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.original = original

    def __repr__(self):
        return f"<StorageError kind={self.kind.value} message={self.message!r}>"


# MySQL errno -> kind
_MYSQL_CODES = {
    1062: StorageErrorKind.DUPLICATE_KEY,
    1216: StorageErrorKind.FOREIGN_KEY,
    1217: StorageErrorKind.FOREIGN_KEY,
    1451: StorageErrorKind.FOREIGN_KEY,
    1452: StorageErrorKind.FOREIGN_KEY,
    1048: StorageErrorKind.NOT_NULL,
    3819: StorageErrorKind.CHECK,
    1205: StorageErrorKind.CONFLICT,
    1213: StorageErrorKind.CONFLICT,
    1040: StorageErrorKind.CONNECTION_LIMIT,
    2003: StorageErrorKind.UNAVAILABLE,
    2006: StorageErrorKind.UNAVAILABLE,
    2013: StorageErrorKind.UNAVAILABLE,
}

# PostgreSQL SQLSTATE -> kind
_SQLSTATE_CODES = {
    "23505": StorageErrorKind.DUPLICATE_KEY,
    "23503": StorageErrorKind.FOREIGN_KEY,
    "23502": StorageErrorKind.NOT_NULL,
    "23514": StorageErrorKind.CHECK,
    "40001": StorageErrorKind.CONFLICT,
    "40P01": StorageErrorKind.CONFLICT,
    "53300": StorageErrorKind.CONNECTION_LIMIT,
}

# SQLite reports constraint failures only as message text
_SQLITE_MESSAGES = (
    ("unique constraint failed", StorageErrorKind.DUPLICATE_KEY),
    ("foreign key constraint failed", StorageErrorKind.FOREIGN_KEY),
    ("not null constraint failed", StorageErrorKind.NOT_NULL),
    ("check constraint failed", StorageErrorKind.CHECK),
    ("database is locked", StorageErrorKind.CONFLICT),
    ("unable to open database", StorageErrorKind.UNAVAILABLE),
)


def _driver_code(orig: BaseException):
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def classify(error: BaseException) -> StorageErrorKind:
    if isinstance(error, sa_exc.TimeoutError):
        # QueuePool checkout timed out
        return StorageErrorKind.CONNECTION_LIMIT

    orig = getattr(error, "orig", None) or error
    code = _driver_code(orig)
    if isinstance(code, int) and code in _MYSQL_CODES:
        return _MYSQL_CODES[code]
    if isinstance(code, str) and code in _SQLSTATE_CODES:
        return _SQLSTATE_CODES[code]

    text = str(orig).lower()
    for needle, kind in _SQLITE_MESSAGES:
        if needle in text:
            return kind

    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return StorageErrorKind.UNAVAILABLE
    if isinstance(error, (sa_exc.InterfaceError, ConnectionError, OSError)):
        return StorageErrorKind.UNAVAILABLE
    return StorageErrorKind.OTHER


def translate_db_error(error: BaseException) -> StorageError:
    """Wrap a driver/SQLAlchemy error as a StorageError. StorageErrors pass through unchanged."""
    if isinstance(error, StorageError):
        return error
    orig = getattr(error, "orig", None)
    message = str(orig) if orig is not None else str(error)
    kind = classify(error)
    logger.debug(f"Translated {type(error).__name__} as {kind.value}: {message}")
    return StorageError(kind, message, original=error)
