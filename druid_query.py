"""
Druid Query Client
==================

Description:
    One-shot reporting client for a PlyQL MySQL gateway (or a MySQL server
    holding the same wikipedia data). It connects to a single endpoint, runs
    one fixed aggregation query and prints every result row as a line of
    bracketed fields, e.g.

        page[Barack_Obama] count[20000]
        Time[2015-09-12 01:00:00.0] Channel[en] Count[50] Added[1200.000000]

    Any failure to connect, execute or decode a row is reported once on
    stderr with its full traceback; rows printed before the failure stay
    printed and nothing is retried.

Usage:
    druid-query [DESCRIPTOR] [VARIANT]

    DESCRIPTOR  e.g. jdbc:mysql://127.0.0.1:3307/plyql1 (default: DB_DESCRIPTOR
                from the environment or .env, then the local gateway)
    VARIANT     'page' (top pages by row count) or 'channel' (top hour/channel
                groups by count); default 'page'
"""
import logging
import os
import sys
from typing import List, Optional, TextIO

from config_manager import db_config, validate_config
from database_utils import DatabaseConnection
from defines import DEFAULT_VARIANT, channel_query, page_query
from functions import format_channel_row, format_page_row

logger = logging.getLogger(__name__)

# Variant name -> (fixed SQL text, row formatter)
VARIANTS = {
    "page": (page_query, format_page_row),
    "channel": (channel_query, format_channel_row),
}


def run(endpoint: Optional[str] = None, variant: str = DEFAULT_VARIANT, out: Optional[TextIO] = None) -> bool:
    """
    Run the variant's query against endpoint and print one line per row.

    Returns:
        True once every row has been printed, False after a reported failure

    Raises:
        ValueError: If variant is not one of VARIANTS
    """
    if variant not in VARIANTS:
        raise ValueError(f"Unknown variant '{variant}', expected one of: {', '.join(VARIANTS)}")
    query, format_row = VARIANTS[variant]
    out = out or sys.stdout

    try:
        with DatabaseConnection(endpoint) as db:
            for row in db.stream_query(query):
                out.write(format_row(row) + "\n")
    except Exception:
        logger.exception(f"Query against {endpoint or db_config.descriptor} failed")
        return False
    finally:
        out.flush()

    return True


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point; returns the process exit status"""
    args = sys.argv[1:] if argv is None else argv

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if len(args) > 2 or (args and args[0] in ("-h", "--help")):
        print(__doc__.split("Usage:")[1], file=sys.stderr)
        return 2

    endpoint = args[0] if args else None
    variant = args[1] if len(args) > 1 else DEFAULT_VARIANT
    if variant not in VARIANTS:
        print(f"Unknown variant '{variant}', expected one of: {', '.join(VARIANTS)}", file=sys.stderr)
        return 2

    # validate_config reports what is missing
    if not validate_config():
        return 1

    return 0 if run(endpoint, variant) else 1


if __name__ == "__main__":
    sys.exit(main())
