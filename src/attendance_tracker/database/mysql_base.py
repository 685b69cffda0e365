from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateRecordError, StoreUnavailableError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_UNAVAILABLE = (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError)


def translate_error(exc: mysql.connector.Error) -> Exception:
    """Map driver errors onto the domain taxonomy; others pass through untouched."""
    if isinstance(exc, mysql.connector.errors.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY:
        return DuplicateRecordError()
    if isinstance(exc, _UNAVAILABLE):
        return StoreUnavailableError()
    return exc


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple[Any, Any]]:
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("database connection failed: %s", exc)
        raise StoreUnavailableError() from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        _rollback_quietly(conn)
        mapped = translate_error(exc)
        if mapped is exc:
            raise
        if isinstance(mapped, StoreUnavailableError):
            logger.error("database operation failed: %s", exc)
        raise mapped from exc
    except Exception:
        _rollback_quietly(conn)
        raise
    finally:
        conn.close()


def _rollback_quietly(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        logger.warning("rollback failed", exc_info=True)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
