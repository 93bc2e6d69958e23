"""SQL Server connections through pyodbc."""

import logging
from typing import Any

try:
    import pyodbc
    PYODBC_AVAILABLE = True
except ImportError:
    PYODBC_AVAILABLE = False

from sqlbatch.config import RunConfig, SqlAuth
from sqlbatch.errors import DatabaseConnectionError


logger = logging.getLogger(__name__)

# SQLSTATE class 08 covers connection exceptions (08001, 08S01, ...)
CONNECTION_SQLSTATE_CLASS = "08"


def _quote(value: str) -> str:
    """Brace-quote an ODBC attribute value."""
    return "{" + value.replace("}", "}}") + "}"


def build_connection_string(config: RunConfig) -> str:
    """
    Build an ODBC connection string for the configured target.

    Integrated auth uses Trusted_Connection; SQL auth adds UID/PWD.
    """
    parts = [
        f"DRIVER={_quote(config.driver)}",
        f"SERVER={_quote(config.server)}",
        f"DATABASE={_quote(config.database)}",
    ]

    if isinstance(config.auth, SqlAuth):
        parts.append(f"UID={_quote(config.auth.username)}")
        parts.append(f"PWD={_quote(config.auth.password.get_secret_value())}")
    else:
        parts.append("Trusted_Connection=yes")

    if config.trust_server_certificate:
        parts.append("TrustServerCertificate=yes")

    return ";".join(parts) + ";"


def open_connection(config: RunConfig) -> Any:
    """
    Open a new autocommit connection for the configured target.

    Applies the query timeout when one is set. The caller owns the
    connection and must close it.

    Raises:
        DatabaseConnectionError: driver missing or connection refused
    """
    if not PYODBC_AVAILABLE:
        raise DatabaseConnectionError(
            "pyodbc not installed - cannot connect to SQL Server", config.describe()
        )

    logger.debug(f"Opening connection to {config.server}/{config.database}")
    try:
        conn = pyodbc.connect(
            build_connection_string(config),
            autocommit=True,
            timeout=config.login_timeout,
        )
    except pyodbc.Error as e:
        raise DatabaseConnectionError(f"Cannot connect: {e}", config.describe()) from e

    if config.query_timeout:
        conn.timeout = config.query_timeout

    return conn


def is_connection_lost(error: BaseException) -> bool:
    """True when a driver error reports a connection-class SQLSTATE."""
    if isinstance(error, DatabaseConnectionError):
        return True
    args = getattr(error, "args", ())
    if not args or not isinstance(args[0], str):
        return False
    return args[0].startswith(CONNECTION_SQLSTATE_CLASS)
