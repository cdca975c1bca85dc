from typing import Optional


class LexSQLError(Exception):
    """Base error for the question → SQL → rows pipeline.

    Every subclass carries the HTTP status the API answers with and a short
    message that is safe to show to the user.
    """

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class GenerationFailure(LexSQLError):
    status_code = 502
    default_message = "Failed to generate query"


class ValidationFailure(LexSQLError):
    status_code = 400
    default_message = "Only SELECT queries are allowed"

    def __init__(self, message: Optional[str] = None, keyword: Optional[str] = None):
        super().__init__(message)
        self.keyword = keyword


class QueryTimeout(LexSQLError):
    status_code = 504
    default_message = "The query took too long and was cancelled"


class DatabaseError(LexSQLError):
    status_code = 500
    default_message = "An unexpected database error occurred"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, mapped: bool = False):
        super().__init__(message)
        self.code = code
        # a known SQLSTATE is a problem with the query, anything else is ours
        if mapped:
            self.status_code = 400


class NoData(LexSQLError):
    status_code = 422
    default_message = "No data to chart"


class InvalidChartConfig(LexSQLError):
    status_code = 502
    default_message = "Failed to generate chart suggestion"


class ExplanationFailure(LexSQLError):
    status_code = 502
    default_message = "Failed to generate query explanation"
