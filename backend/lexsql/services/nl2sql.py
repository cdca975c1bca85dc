import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..core.config import settings
from ..core.errors import GenerationFailure, QueryTimeout
from ..db.errors import TABLE_ALREADY_CREATED, UNDEFINED_TABLE, database_error, error_code
from ..db.session import init_db
from ..schemas.query import GeneratedQuery, Row
from .provider import StructuredGenerator
from .sql_guard import ensure_valid, normalize_identifiers

logger = logging.getLogger(__name__)

TABLE_SCHEMA = """legalprompt (
  id SERIAL PRIMARY KEY,
  name VARCHAR(255) NOT NULL,
  prompt TEXT NOT NULL,
  category VARCHAR(255) NOT NULL,
  "createdAt" TIMESTAMP NOT NULL DEFAULT NOW(),
  "systemMessage" TEXT
);"""

SQL_SYSTEM = f"""You are a SQL (postgres) and data visualization expert. Your job is to help the user write a SQL query to retrieve the data they need.

Table schema:
{TABLE_SCHEMA}

Rules:
- Return exactly one SELECT statement. Only retrieval queries are allowed, never modify data.
- Column names are case-sensitive. Always write "createdAt" and "systemMessage" with double quotes and exact casing.
- For text filters use ILIKE with LOWER() on both sides, e.g. LOWER(name) ILIKE LOWER('%term%').
- Every query that returns data for a chart must return at least two columns. When the user asks for a single column, also return the column used to group or order it.
- Aggregations (COUNT, SUM, AVG) must alias their result, e.g. COUNT(*) AS count, and be grouped by the other selected columns.
- For questions over time use "createdAt"; group by day with DATE_TRUNC('day', "createdAt") and alias it.
- Relative ranges such as "last month" are computed from NOW(), e.g. "createdAt" >= NOW() - INTERVAL '1 month'.
- No comments, no trailing text, no code fences."""


def build_sql_prompt(question: str) -> str:
    return f"Generate the query necessary to retrieve the data the user wants: {question}"


async def generate_query(generator: StructuredGenerator, question: str) -> str:
    """Turn a question into a normalized, validated SELECT."""
    logger.debug("Generating query for input: %s", question)
    try:
        result = await generator.generate(SQL_SYSTEM, build_sql_prompt(question), GeneratedQuery)
        raw = (result.query or "").strip()
        if not raw:
            raise ValueError("model returned an empty query")
        logger.debug("Raw query from model: %s", raw)
        query = ensure_valid(normalize_identifiers(raw))
    except Exception as e:
        logger.warning("Error generating query: %s", e)
        raise GenerationFailure() from e
    logger.debug("Final processed query: %s", query)
    return query


# One attempt against the database ends in exactly one of these.

@dataclass
class Rows:
    rows: List[Row] = field(default_factory=list)


@dataclass
class SchemaMissing:
    code: str = UNDEFINED_TABLE


@dataclass
class DbFailure:
    code: Optional[str]
    detail: str


Outcome = Union[Rows, SchemaMissing, DbFailure]


def _to_scalar(value):
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


async def _fetch_rows(engine: AsyncEngine, sql: str) -> List[Row]:
    async with engine.connect() as conn:
        result = await conn.execute(text(sql))
        return [{k: _to_scalar(v) for k, v in row.items()} for row in result.mappings().all()]


async def _run_once(engine: AsyncEngine, sql: str, timeout: float) -> Outcome:
    try:
        rows = await asyncio.wait_for(_fetch_rows(engine, sql), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning("Query exceeded %ss and was cancelled: %s", timeout, sql)
        raise QueryTimeout() from e
    except DBAPIError as e:
        code = error_code(e)
        if code == UNDEFINED_TABLE:
            return SchemaMissing(code)
        logger.error("Error executing query (code=%s): %s | %s", code, sql, e.orig)
        return DbFailure(code, str(e.orig))
    logger.debug("Query executed successfully, %d rows", len(rows))
    return Rows(rows)


def _raise_for(outcome: Outcome) -> None:
    if isinstance(outcome, (SchemaMissing, DbFailure)):
        raise database_error(outcome.code)


async def execute_query(engine: AsyncEngine, sql: str, timeout: Optional[float] = None) -> List[Row]:
    """Run a read-only query, creating and seeding legalprompt on first use.

    The query is validated again here; a missing table triggers exactly one
    create-seed-retry cycle.
    """
    ensure_valid(sql)
    timeout = timeout or settings.QUERY_TIMEOUT_S
    logger.debug("Executing query: %s", sql)

    outcome = await _run_once(engine, sql, timeout)
    if isinstance(outcome, SchemaMissing):
        logger.info("Table legalprompt does not exist, creating and seeding")
        try:
            await init_db(engine, seed=True)
        except DBAPIError as e:
            code = error_code(e)
            if code not in TABLE_ALREADY_CREATED:
                logger.error("Creating legalprompt failed (code=%s): %s", code, e.orig)
                raise database_error(code) from e
            logger.info("legalprompt was created by another request (code=%s)", code)
        logger.debug("Retrying original query after table creation")
        outcome = await _run_once(engine, sql, timeout)

    _raise_for(outcome)
    return outcome.rows
