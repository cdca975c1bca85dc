from typing import Optional
from sqlalchemy.exc import DBAPIError
from ..core.errors import DatabaseError

UNDEFINED_TABLE = "42P01"
# a concurrent CREATE TABLE IF NOT EXISTS won the race
TABLE_ALREADY_CREATED = ("42P07", "23505")

# Postgres SQLSTATE -> message shown to the user
PG_ERROR_MESSAGES = {
    "42601": "The query has a syntax error.",
    "42703": "The query references a column that does not exist.",
    UNDEFINED_TABLE: "The query references a table that does not exist.",
    "42883": "The query uses a function or operator that does not exist.",
    "42803": "Every selected column must be grouped or aggregated.",
    "42804": "The query compares or combines incompatible data types.",
    "42702": "A column reference in the query is ambiguous.",
    "42501": "The database user is not allowed to run this query.",
    "23505": "The query violates a unique constraint.",
    "23503": "The query violates a foreign key constraint.",
    "23502": "The query violates a not-null constraint.",
    "23514": "The query violates a check constraint.",
    "22P02": "A value in the query has the wrong format for its column type.",
    "22007": "A date or time value in the query is invalid.",
    "22008": "A date or time value in the query is out of range.",
    "22003": "A numeric value in the query is out of range.",
    "22012": "The query divides by zero.",
    "25006": "Only read-only queries are allowed.",
    "57014": "The query took too long and was cancelled.",
    "53200": "The database ran out of memory running the query.",
    "53300": "The database has too many open connections, try again shortly.",
    "08001": "Could not connect to the database.",
    "08006": "The database connection was lost.",
}

UNEXPECTED_DB_ERROR = "An unexpected database error occurred."

# SQLite has no SQLSTATE; map the messages we care about onto Postgres codes.
SQLITE_MESSAGE_CODES = {
    "no such table": UNDEFINED_TABLE,
    "no such column": "42703",
    "syntax error": "42601",
    "misuse of aggregate": "42803",
}


def error_code(exc: DBAPIError) -> Optional[str]:
    """Pull the SQLSTATE out of a wrapped driver error."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    text = str(orig).lower()
    for fragment, code in SQLITE_MESSAGE_CODES.items():
        if fragment in text:
            return code
    return None


def describe_db_error(code: Optional[str]) -> str:
    return PG_ERROR_MESSAGES.get(code or "", UNEXPECTED_DB_ERROR)


def database_error(code: Optional[str]) -> DatabaseError:
    """DatabaseError for a SQLSTATE; unmapped codes are server errors."""
    return DatabaseError(describe_db_error(code), code=code, mapped=code in PG_ERROR_MESSAGES)
