from cryptography.fernet import Fernet
from datetime import datetime

from defines import NULL_TEXT, page_template, channel_template

def get_sql_password(password_path: str, key_path: str) -> str:
    """
    Reads an encryption key from a text file and uses it to decrypt the database password.

    Args:
        password_path: File holding the Fernet-encrypted password
        key_path: File holding the Fernet key

    Returns:
        str: The decrypted password.

    Raises:
        FileNotFoundError: If the password or key file is missing.
        cryptography.fernet.InvalidToken: If decryption fails.
    """
    with open(key_path, "r") as f:
        key = f.read().strip().encode()  # Read and encode the key
    fernet = Fernet(key)
    with open(password_path, "rb") as f:
        encrypted = f.read()

    return fernet.decrypt(encrypted).decode()

def timestamp_to_text(value) -> str:
    """
    Render a timestamp the way java.sql.Timestamp.toString() does:
    'yyyy-mm-dd hh:mm:ss.f' with trailing zeros trimmed from the fraction,
    keeping at least one digit.
    """
    if value is None:
        return NULL_TEXT
    if not isinstance(value, datetime):
        # Plain dates are midnight timestamps
        value = datetime(value.year, value.month, value.day)

    nanos = "%09d" % (value.microsecond * 1000)
    fraction = nanos.rstrip("0") or "0"
    return value.strftime("%Y-%m-%d %H:%M:%S") + "." + fraction

def string_to_text(value) -> str:
    return NULL_TEXT if value is None else value

def format_page_row(row) -> str:
    """page[<page>] count[<cnt>]"""
    page = row.get_string("page")
    count = row.get_long("cnt")
    return page_template % (string_to_text(page), count)

def format_channel_row(row) -> str:
    """Time[<Time>] Channel[<Channel>] Count[<Count>] Added[<Added>]"""
    time_value = row.get_timestamp("Time")
    channel = row.get_string("Channel")
    count = row.get_long("Count")
    added = row.get_double("Added")
    return channel_template % (timestamp_to_text(time_value), string_to_text(channel), count, added)

