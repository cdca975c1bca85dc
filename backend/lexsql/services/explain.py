import logging
from typing import List

from ..core.errors import ExplanationFailure
from ..schemas.query import QueryExplanation, QueryExplanations
from .nl2sql import TABLE_SCHEMA
from .provider import StructuredGenerator

logger = logging.getLogger(__name__)

EXPLAIN_SYSTEM = f"""You are a SQL (postgres) expert. Your job is to explain to the user the SQL query you wrote to retrieve the data they asked for. The table schema is as follows:
{TABLE_SCHEMA}

When you explain you must take a section of the query, and then explain it. Each "section" should be unique and sections must not overlap. So in a query like: "SELECT * FROM legalprompt limit 20", the sections could be "SELECT *", "FROM legalprompt", "LIMIT 20".
List the sections in the order they appear in the query.
If a section doesn't have any explanation, include it, but leave the explanation empty."""


def build_explain_prompt(question: str, sql: str) -> str:
    return (
        "Explain the SQL query you generated to retrieve the data the user wanted. "
        "Assume the user is not an expert in SQL. Break down the query into steps. Be concise.\n\n"
        f"User Query:\n{question}\n\n"
        f"Generated SQL Query:\n{sql}"
    )


def _in_query_order(sql: str, explanations: List[QueryExplanation]) -> List[QueryExplanation]:
    # sections the model paraphrased keep their relative position at the end
    lowered = sql.lower()
    positions = {}
    cursor = 0
    for i, item in enumerate(explanations):
        found = lowered.find(item.section.strip().lower(), cursor)
        if found == -1:
            found = lowered.find(item.section.strip().lower())
        positions[i] = found if found != -1 else len(lowered) + i
        if found != -1:
            cursor = found
    order = sorted(range(len(explanations)), key=lambda i: (positions[i], i))
    return [explanations[i] for i in order]


async def explain_query(generator: StructuredGenerator, question: str, sql: str) -> List[QueryExplanation]:
    logger.debug("Explaining query for input: %s", question)
    try:
        result = await generator.generate(EXPLAIN_SYSTEM, build_explain_prompt(question, sql), QueryExplanations)
    except Exception as e:
        logger.warning("Error generating query explanation: %s", e)
        raise ExplanationFailure() from e

    return _in_query_order(sql, list(result.explanations))
