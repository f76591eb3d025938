# Endpoint used when neither the command line nor the environment names one
DEFAULT_DESCRIPTOR = "jdbc:mysql://127.0.0.1:3307/plyql1"
DEFAULT_PORT = 3306

DEFAULT_ODBC_DRIVER = "MySQL ODBC 8.0 Unicode Driver"

DEFAULT_VARIANT = "page"

# Fixed report queries - ordering and limits are left to the server
page_query = (
    "SELECT page, count(*) AS cnt FROM wikipedia "
    "GROUP BY page ORDER BY cnt DESC LIMIT 15"
)

channel_query = (
    "SELECT TIME_BUCKET(__time, PT1H, 'Etc/UTC') AS Time, channel AS Channel, "
    "isNew AS IsNew, SUM(count) AS Count, SUM(added)/100 AS Added "
    "FROM wikipedia GROUP BY 1,2,3 ORDER BY Count DESC LIMIT 5"
)

page_template = "page[%s] count[%d]"
channel_template = "Time[%s] Channel[%s] Count[%d] Added[%f]"

# JDBC renders SQL NULL strings and timestamps as the literal text "null"
NULL_TEXT = "null"
