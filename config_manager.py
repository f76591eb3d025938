"""
Configuration Manager for the Druid query client
Handles environment variables and connection descriptors
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlsplit, parse_qs
from dotenv import load_dotenv

from defines import DEFAULT_DESCRIPTOR, DEFAULT_ODBC_DRIVER, DEFAULT_PORT
from functions import get_sql_password

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


@dataclass
class ConnectionDescriptor:
    """Parsed form of <scheme>://<host>:<port>/<database>[?user=...&password=...]"""
    scheme: str
    host: str
    port: int
    database: str
    user: Optional[str] = None
    password: Optional[str] = None
    raw: str = ""


def parse_descriptor(descriptor: str) -> ConnectionDescriptor:
    """
    Parse a connection descriptor such as 'jdbc:mysql://127.0.0.1:3307/plyql1'.

    A leading 'jdbc:' is ignored. Only the shape needed to address the
    endpoint is checked; anything the server rejects is left to the driver.

    Raises:
        ValueError: If the descriptor has no scheme or host
    """
    text = descriptor.strip()
    if text.lower().startswith("jdbc:"):
        text = text[len("jdbc:"):]

    parts = urlsplit(text)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Malformed connection descriptor: {descriptor!r}")

    # .port raises ValueError itself on a non-numeric or out of range port
    port = parts.port or DEFAULT_PORT
    query = parse_qs(parts.query)

    return ConnectionDescriptor(
        scheme=parts.scheme,
        host=parts.hostname,
        port=port,
        database=parts.path.lstrip("/"),
        user=query.get("user", [parts.username])[0],
        password=query.get("password", [parts.password])[0],
        raw=descriptor,
    )


def odbc_value(value: str) -> str:
    """Quote a connection string attribute value: {value} with any '}' doubled"""
    return "{" + str(value).replace("}", "}}") + "}"


class DatabaseConfig:
    """Database configuration handler"""

    def __init__(self):
        """Initialize database configuration from environment variables"""
        self.descriptor = os.getenv('DB_DESCRIPTOR') or DEFAULT_DESCRIPTOR
        self.driver = os.getenv('DB_ODBC_DRIVER', DEFAULT_ODBC_DRIVER)
        self.username = os.getenv('DB_USERNAME')
        self.password_path = os.getenv('DB_PASSWORD_PATH')
        self.password_key_path = os.getenv('DB_PASSWORD_KEY_PATH')

    def missing_fields(self) -> List[str]:
        """Names of the settings needed to build a connection string that are absent"""
        missing = []
        if not self.driver:
            missing.append('driver')
        if bool(self.password_path) != bool(self.password_key_path):
            missing.append('password_key_path' if self.password_path else 'password_path')
        return missing

    def validate(self) -> bool:
        """
        Validate that the configuration needed to build a connection string is present.

        Returns:
            True if all required fields are present, False otherwise
        """
        missing = self.missing_fields()
        if missing:
            logger.error(f"Missing database configuration: {', '.join(missing)} "
                         "(check your .env file or environment variables)")
            return False

        return True

    def get_password(self) -> Optional[str]:
        """Decrypt the stored password, if password files are configured"""
        if not (self.password_path and self.password_key_path):
            return None
        return get_sql_password(self.password_path, self.password_key_path)

    def get_connection_string(self, descriptor: Optional[str] = None) -> str:
        """
        Build and return the ODBC connection string for a descriptor.

        Every value is brace-quoted so that ';', '=' or '}' in a descriptor
        cannot end an attribute early or add another one.

        Args:
            descriptor: Connection descriptor; falls back to DB_DESCRIPTOR

        Returns:
            Formatted connection string

        Raises:
            ValueError: If configuration or descriptor is invalid
        """
        missing = self.missing_fields()
        if missing:
            raise ValueError(f"Missing database configuration: {', '.join(missing)}")

        target = parse_descriptor(descriptor or self.descriptor)

        connection_string = (
            f"DRIVER={odbc_value(self.driver)};"
            f"SERVER={odbc_value(target.host)};"
            f"PORT={target.port};"
        )
        if target.database:
            connection_string += f"DATABASE={odbc_value(target.database)};"

        username = target.user or self.username
        if username:
            connection_string += f"UID={odbc_value(username)};"

        password = target.password
        if password is None:
            password = self.get_password()
        if password:
            connection_string += f"PWD={odbc_value(password)};"

        return connection_string

# Create global instance
db_config = DatabaseConfig()


def validate_config() -> bool:
    """
    Validate the database configuration.

    Returns:
        True if configuration is valid
    """
    return db_config.validate()
