from database_utils import ResultRow, column_index

ENV_KEYS = ("DB_DESCRIPTOR", "DB_ODBC_DRIVER", "DB_USERNAME", "DB_PASSWORD_PATH", "DB_PASSWORD_KEY_PATH")


def describe(*names):
    """Build a pyodbc-style cursor description for the given column labels"""
    return [(name, str, None, None, None, None, True) for name in names]


def make_row(names, values):
    return ResultRow(column_index(describe(*names)), values)
