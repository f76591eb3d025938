"""
Database utilities for the Druid query client
Handles connections to the PlyQL MySQL gateway and row streaming using pyodbc
"""

import pyodbc
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, Optional, Sequence
from dateutil import parser

from config_manager import db_config

# Configure logging
logger = logging.getLogger(__name__)

# Bounds of a signed 64-bit integer count
LONG_MIN = -2 ** 63
LONG_MAX = 2 ** 63 - 1


class QueryError(Exception):
    """Raised for any failure to connect, execute or decode a result row"""


class ResultRow:
    """
    One decoded record of a result set.
    Values are looked up by column label (case-insensitive, first match wins)
    and converted to the requested type, failing loudly on a mismatch.
    """

    def __init__(self, columns: Dict[str, int], values: Sequence[Any]):
        self._columns = columns
        self._values = values

    def _get(self, name: str) -> Any:
        index = self._columns.get(name.lower())
        if index is None:
            raise QueryError(f"Column '{name}' not found")
        return self._values[index]

    def get_string(self, name: str) -> Optional[str]:
        value = self._get(name)
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8")
        return str(value)

    def get_long(self, name: str) -> int:
        """Integer count; SQL NULL reads as 0"""
        value = self._get(name)
        if value is None:
            return 0
        if isinstance(value, bool):
            raise QueryError(f"Column '{name}' value {value!r} is not an integer")
        if isinstance(value, int):
            return self._check_long_range(name, value)
        try:
            number = Decimal(value.strip() if isinstance(value, str) else value)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise QueryError(f"Column '{name}' value {value!r} is not an integer") from e
        if not number.is_finite() or number != number.to_integral_value():
            raise QueryError(f"Column '{name}' value {value!r} is not an integer")
        return self._check_long_range(name, int(number))

    @staticmethod
    def _check_long_range(name: str, number: int) -> int:
        if not LONG_MIN <= number <= LONG_MAX:
            raise QueryError(f"Column '{name}' value {number} is out of range for a 64-bit integer")
        return number

    def get_double(self, name: str) -> float:
        """Floating-point value; SQL NULL reads as 0.0"""
        value = self._get(name)
        if value is None:
            return 0.0
        if isinstance(value, bool):
            raise QueryError(f"Column '{name}' value {value!r} is not a number")
        if isinstance(value, (int, float, Decimal)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError as e:
                raise QueryError(f"Column '{name}' value {value!r} is not a number") from e
        raise QueryError(f"Column '{name}' value {value!r} is not a number")

    def get_timestamp(self, name: str) -> Optional[datetime]:
        value = self._get(name)
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            try:
                return parser.parse(value)
            except (ValueError, OverflowError) as e:
                raise QueryError(f"Column '{name}' value {value!r} is not a timestamp") from e
        raise QueryError(f"Column '{name}' value {value!r} is not a timestamp")


def column_index(description) -> Dict[str, int]:
    """Map lower-cased column labels from a cursor description to their positions"""
    columns = {}
    for index, column in enumerate(description or ()):
        columns.setdefault(column[0].lower(), index)
    return columns


class DatabaseConnection:
    """
    Database connection manager for a single query run.
    Handles connection lifecycle and streams result rows one at a time.
    """

    def __init__(self, descriptor: Optional[str] = None):
        """Initialize database connection manager"""
        self.descriptor = descriptor
        self.connection = None
        self.cursor = None

    def connect(self):
        """
        Establish connection to the database.

        Raises:
            QueryError: If the descriptor is malformed or the endpoint refuses the connection
        """
        try:
            connection_string = db_config.get_connection_string(self.descriptor)
            self.connection = pyodbc.connect(connection_string)
            self.cursor = self.connection.cursor()
        except (pyodbc.Error, ValueError) as e:
            self.disconnect()
            raise QueryError(f"Failed to connect to {self.descriptor or db_config.descriptor}: {e}") from e
        logger.debug("Database connection established")

    def disconnect(self):
        """Close database connection and cursor"""
        if self.cursor is not None:
            self.cursor.close()
            self.cursor = None
        if self.connection is not None:
            self.connection.close()
            self.connection = None
        logger.debug("Database connection closed")

    def stream_query(self, query: str) -> Iterator[ResultRow]:
        """
        Execute a SELECT query and return a forward-only iterator over its rows.

        The query runs before this returns; rows are fetched lazily as the
        iterator is consumed and the iterator cannot be restarted.

        Raises:
            QueryError: If query execution fails
        """
        logger.debug(f"Query: {query}")
        try:
            self.cursor.execute(query)
        except pyodbc.Error as e:
            raise QueryError(f"Query execution failed: {e}") from e

        return self._iter_rows(column_index(self.cursor.description))

    def _iter_rows(self, columns: Dict[str, int]) -> Iterator[ResultRow]:
        while True:
            try:
                values = self.cursor.fetchone()
            except pyodbc.Error as e:
                raise QueryError(f"Fetching result row failed: {e}") from e
            if values is None:
                return
            yield ResultRow(columns, values)

    def __enter__(self):
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.disconnect()
