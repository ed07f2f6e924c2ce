from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, TypeVar

import mysql.connector
from mysql.connector import errors as mysql_errors

from ..core.constants import READ_RETRY_ATTEMPTS
from ..core.exceptions import StorageError
from .connection import DatabaseConnection

logger = logging.getLogger("rfid_attendance.storage")

T = TypeVar("T")

_TRANSIENT_ERRORS = (mysql_errors.InterfaceError, mysql_errors.OperationalError)


def _to_storage_error(exc: mysql.connector.Error) -> StorageError:
    transient = isinstance(exc, _TRANSIENT_ERRORS)
    logger.error("database error (transient=%s): %s", transient, exc)
    return StorageError("Database operation failed", transient=transient)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (connection, cursor) inside one transaction.

    Commits when the block exits normally, rolls back on any exception. Driver
    errors leave as StorageError.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise _to_storage_error(e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        raise _to_storage_error(e) from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as e:
        logger.warning("rollback failed: %s", e)


def read_with_retry(
    conn_factory: DatabaseConnection,
    query: Callable[[Any], T],
    *,
    attempts: int = READ_RETRY_ATTEMPTS,
) -> T:
    """Run a read-only query, retrying on transient storage failures.

    Only for pure reads: writes go through db_cursor directly and are never retried.
    """
    attempt = 1
    while True:
        try:
            with db_cursor(conn_factory) as (_, cur):
                return query(cur)
        except StorageError as e:
            if not e.transient or attempt >= attempts:
                raise
            logger.warning("retrying read after transient failure (attempt %d/%d)", attempt, attempts)
            attempt += 1


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
