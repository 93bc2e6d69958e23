"""Health check for the database dependency."""

import logging
from typing import Any, Callable

from sqlbatch.config import RunConfig
from sqlbatch.errors import DatabaseConnectionError
from .database import open_connection

logger = logging.getLogger(__name__)

PROBE_QUERY = "SELECT @@SERVERNAME"


def check_connection(
    config: RunConfig,
    connect: Callable[[RunConfig], Any] = open_connection,
) -> None:
    """
    Confirm the configured connection works before any script runs.

    Opens one connection, runs a no-op probe query and discards the
    result. The connection is always closed before returning.

    Raises:
        DatabaseConnectionError: connection or probe failed; carries the
            attempted target without secrets
    """
    logger.info(f"Checking connection to {config.server}/{config.database}")

    conn = None
    try:
        conn = connect(config)
        cursor = conn.cursor()
        try:
            cursor.execute(PROBE_QUERY)
            cursor.fetchall()
        finally:
            cursor.close()
    except DatabaseConnectionError:
        raise
    except Exception as e:
        logger.debug(f"Probe query failed: {e}", exc_info=True)
        raise DatabaseConnectionError(f"Connection check failed: {e}", config.describe()) from e
    finally:
        if conn is not None:
            conn.close()

    logger.info("Connection check passed")
