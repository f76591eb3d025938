import pytest

import database_utils
from helpers import ENV_KEYS


class FakeCursor:
    def __init__(self, description, rows, execute_error=None, fetch_error_at=None):
        self.description = description
        self.rows = list(rows)
        self.execute_error = execute_error
        self.fetch_error_at = fetch_error_at
        self.queries = []
        self.fetched = 0
        self.closed = False

    def execute(self, query):
        self.queries.append(query)
        if self.execute_error is not None:
            raise self.execute_error
        return self

    def fetchone(self):
        if self.fetch_error_at is not None and self.fetched == self.fetch_error_at:
            raise database_utils.pyodbc.OperationalError("08S01", "Communication link failure")
        if self.fetched >= len(self.rows):
            return None
        row = self.rows[self.fetched]
        self.fetched += 1
        return row

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.closed = False

    def cursor(self):
        return self._cursor

    def close(self):
        self.closed = True


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_db(monkeypatch):
    """
    Replace pyodbc.connect with a fake returning the given rows.
    Returns a factory; the factory returns the FakeConnection handed to the client.
    """
    state = {"connection_strings": []}

    def install(description, rows, **cursor_options):
        connection = FakeConnection(FakeCursor(description, rows, **cursor_options))

        def connect(connection_string):
            state["connection_strings"].append(connection_string)
            return connection

        monkeypatch.setattr(database_utils.pyodbc, "connect", connect)
        connection.connection_strings = state["connection_strings"]
        return connection

    return install


@pytest.fixture
def refused_db(monkeypatch):
    def connect(connection_string):
        raise database_utils.pyodbc.OperationalError("08001", "Can't connect to MySQL server on '127.0.0.1'")

    monkeypatch.setattr(database_utils.pyodbc, "connect", connect)
