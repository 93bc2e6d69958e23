"""Run a directory of SQL scripts against SQL Server and save each result."""

__version__ = "0.1.0"
