"""
Command-line entry point.
Runs every .sql file in a directory and writes each result next to it.
"""
import sys
import logging
import argparse

from sqlbatch.config import OutputFormat, load_settings, resolve_config, setup_logging
from sqlbatch.interfaces.console import ConsoleOperator
from sqlbatch.runner import EXIT_FAILURE, BatchRunner

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='sqlbatch',
        description='Run a directory of SQL scripts against SQL Server and save each result',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=r"""
Examples:
  sqlbatch ./reports --server db01 --database Sales
  sqlbatch ./reports --server db01\SQLEXPRESS --database Sales --format table
  sqlbatch ./reports --server db01 --database Sales --sql-auth --username report_user

  # Environment variables (also read from .env):
  SQLBATCH_ODBC_DRIVER="ODBC Driver 17 for SQL Server" sqlbatch ./reports ...

Each script.sql produces script.csv (or script.txt for --format table)
in the same folder. Existing output files are overwritten.
        """
    )

    parser.add_argument('script_dir', help='Folder containing .sql files')
    parser.add_argument('--server', '-S', required=True,
                        help=r'SQL Server host or host\instance')
    parser.add_argument('--database', '-d', required=True, help='Target database')
    parser.add_argument(
        '--format', '-f',
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.CSV.value,
        help='Output file format (default: csv)'
    )
    parser.add_argument(
        '--sql-auth',
        action='store_true',
        help='Prompt for SQL Server login instead of integrated authentication'
    )
    parser.add_argument('--username', '-U', help='SQL login name (implies --sql-auth)')
    parser.add_argument(
        '--stop-on-error',
        action='store_true',
        help='Stop the batch at the first failing script'
    )
    parser.add_argument('--query-timeout', type=_non_negative_int,
                        help='Query timeout in seconds, 0 for none (env SQLBATCH_QUERY_TIMEOUT)')
    parser.add_argument('--login-timeout', type=_non_negative_int,
                        help='Login timeout in seconds (env SQLBATCH_LOGIN_TIMEOUT)')
    parser.add_argument('--driver', help='ODBC driver name (env SQLBATCH_ODBC_DRIVER)')
    parser.add_argument(
        '--trust-server-certificate',
        action='store_true',
        help='Skip TLS certificate validation (env SQLBATCH_TRUST_SERVER_CERTIFICATE)'
    )
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (env LOG_LEVEL)'
    )

    args = parser.parse_args(argv)
    if args.username:
        args.sql_auth = True
    return args


def main(argv=None, operator=None, connect=None):
    """
    Resolve arguments, run the batch and exit with its code.

    Exit codes: 0 when every script ran or the operator declined,
    1 on any fatal error or failed script.
    """
    args = parse_args(argv)
    operator = operator or ConsoleOperator()

    try:
        settings = load_settings()
    except ValueError as error:
        operator.emit(f"Error: {error}")
        sys.exit(EXIT_FAILURE)

    setup_logging(args.log_level or settings.log_level)

    runner = BatchRunner(operator) if connect is None else BatchRunner(operator, connect=connect)
    exit_code = runner.run(lambda: resolve_config(args, settings, operator))
    logger.debug(f"Exiting with code {exit_code}")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
