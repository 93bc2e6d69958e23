"""Configuration management for the script runner."""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"
DEFAULT_LOGIN_TIMEOUT = 15


class OutputFormat(str, Enum):
    """Artifact format selector."""
    CSV = "csv"
    TABLE = "table"

    @property
    def suffix(self) -> str:
        return ".csv" if self is OutputFormat.CSV else ".txt"


class IntegratedAuth(BaseModel):
    """Use the host's integrated identity (Trusted_Connection)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["integrated"] = "integrated"

    def describe(self) -> str:
        return "integrated"


class SqlAuth(BaseModel):
    """SQL Server login with username and password."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["sql"] = "sql"
    username: str
    password: SecretStr

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError("username cannot be empty")
        return v.strip()

    def describe(self) -> str:
        return f"sql ({self.username})"


ConnectionAuth = Annotated[Union[IntegratedAuth, SqlAuth], Field(discriminator="kind")]


class RunConfig(BaseModel):
    """Immutable run configuration, resolved once at startup."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    script_dir: Path
    server: str
    database: str
    auth: ConnectionAuth = Field(default_factory=IntegratedAuth)
    output_format: OutputFormat = OutputFormat.CSV
    continue_on_error: bool = True
    query_timeout: int = Field(0, ge=0)
    login_timeout: int = Field(DEFAULT_LOGIN_TIMEOUT, ge=0)
    driver: str = DEFAULT_ODBC_DRIVER
    trust_server_certificate: bool = False

    @field_validator('server', 'database', 'driver')
    @classmethod
    def validate_not_empty(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v.strip()

    def describe(self) -> Dict[str, Any]:
        """Display view of the configuration. Never includes the password."""
        return {
            "server": self.server,
            "database": self.database,
            "auth": self.auth.describe(),
            "format": self.output_format.value,
        }


@dataclass
class Settings:
    """Process-level defaults read from the environment (and .env)."""
    odbc_driver: str = DEFAULT_ODBC_DRIVER
    trust_server_certificate: bool = False
    login_timeout: int = DEFAULT_LOGIN_TIMEOUT
    query_timeout: int = 0
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate settings after initialization."""
        errors = []

        if not self.odbc_driver:
            errors.append("SQLBATCH_ODBC_DRIVER cannot be empty")

        if self.login_timeout < 0:
            errors.append("SQLBATCH_LOGIN_TIMEOUT must be >= 0")

        if self.query_timeout < 0:
            errors.append("SQLBATCH_QUERY_TIMEOUT must be >= 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            errors.append(f"LOG_LEVEL '{self.log_level}' is not a logging level")

        if errors:
            error_message = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_message)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'")


def load_settings() -> Settings:
    """
    Load process defaults from environment variables.

    Loads from .env file if present, then from environment variables.

    Returns:
        Settings object with validated defaults
    """
    load_dotenv()

    try:
        settings = Settings(
            odbc_driver=os.getenv("SQLBATCH_ODBC_DRIVER", DEFAULT_ODBC_DRIVER),
            trust_server_certificate=_env_flag("SQLBATCH_TRUST_SERVER_CERTIFICATE"),
            login_timeout=_env_int("SQLBATCH_LOGIN_TIMEOUT", DEFAULT_LOGIN_TIMEOUT),
            query_timeout=_env_int("SQLBATCH_QUERY_TIMEOUT", 0),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        logger.debug("Settings loaded successfully")
        return settings
    except ValueError as error:
        logger.error(f"Failed to load settings: {error}")
        raise


def resolve_config(args, settings: Settings, operator) -> RunConfig:
    """
    Build the RunConfig from parsed CLI arguments.

    CLI values take precedence over settings. When SQL authentication is
    requested, the username (unless given) and the password are collected
    from the operator.

    Args:
        args: argparse namespace from main.parse_args()
        settings: environment defaults
        operator: interaction capability used for credential prompts

    Returns:
        Validated, frozen RunConfig
    """
    auth: Union[IntegratedAuth, SqlAuth] = IntegratedAuth()
    if args.sql_auth:
        username = args.username or operator.prompt("Username: ")
        password = operator.prompt_secret(f"Password for {username}: ")
        auth = SqlAuth(username=username, password=password)

    return RunConfig(
        script_dir=Path(args.script_dir),
        server=args.server,
        database=args.database,
        auth=auth,
        output_format=OutputFormat(args.format),
        continue_on_error=not args.stop_on_error,
        query_timeout=_pick(args.query_timeout, settings.query_timeout),
        login_timeout=_pick(args.login_timeout, settings.login_timeout),
        driver=args.driver or settings.odbc_driver,
        trust_server_certificate=args.trust_server_certificate or settings.trust_server_certificate,
    )


def _pick(value: Optional[int], default: int) -> int:
    return default if value is None else value


def setup_logging(log_level: str = "INFO"):
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
