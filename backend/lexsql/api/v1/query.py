import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncEngine
from ...core.errors import LexSQLError
from ...db.session import get_engine
from ...schemas.query import (
    ChartIn, ChartOut, ExplainIn, ExplainOut, GeneratedQuery, NLQuery, NLResult,
    RowsOut, RunQuery, columns_of,
)
from ...services.charts import generate_chart_config
from ...services.explain import explain_query
from ...services.nl2sql import execute_query, generate_query
from ...services.provider import StructuredGenerator, get_generator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/query", tags=["query"])

SUGGESTED_QUESTIONS = [
    "List all legal prompts created in the last month",
    "Show the count of legal prompts by category",
    "Find legal prompts with a specific system message",
    "Display legal prompts sorted by creation date",
    "Show the latest legal prompt added",
    "Count of legal prompts created each day for the past week",
    "List all legal prompts with a specific keyword in the name",
    "Show legal prompts grouped by category",
    "Find legal prompts without a system message",
    "Display the total number of legal prompts",
    "Show legal prompts created before a specific date",
]


def _http_error(e: LexSQLError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=NLResult)
async def query(
    body: NLQuery,
    engine: AsyncEngine = Depends(get_engine),
    generator: StructuredGenerator = Depends(get_generator),
):
    try:
        sql = await generate_query(generator, body.question)
        rows = await execute_query(engine, sql)
    except LexSQLError as e:
        raise _http_error(e)

    chart, chart_error = None, None
    if body.chart and rows:
        # rows are already fetched; a chart failure only drops the chart
        try:
            chart = await generate_chart_config(generator, rows, body.question)
        except LexSQLError as e:
            logger.info("Chart skipped: %s", e.message)
            chart_error = e.message
    return NLResult(sql=sql, columns=columns_of(rows), rows=rows, chart=chart, chart_error=chart_error)


@router.post("/generate", response_model=GeneratedQuery)
async def generate(body: NLQuery, generator: StructuredGenerator = Depends(get_generator)):
    try:
        return GeneratedQuery(query=await generate_query(generator, body.question))
    except LexSQLError as e:
        raise _http_error(e)


@router.post("/run", response_model=RowsOut)
async def run(body: RunQuery, engine: AsyncEngine = Depends(get_engine)):
    try:
        rows = await execute_query(engine, body.query)
    except LexSQLError as e:
        raise _http_error(e)
    return RowsOut(columns=columns_of(rows), rows=rows)


@router.post("/explain", response_model=ExplainOut)
async def explain(body: ExplainIn, generator: StructuredGenerator = Depends(get_generator)):
    try:
        return ExplainOut(explanations=await explain_query(generator, body.question, body.sql))
    except LexSQLError as e:
        raise _http_error(e)


@router.post("/chart", response_model=ChartOut)
async def chart(body: ChartIn, generator: StructuredGenerator = Depends(get_generator)):
    try:
        return ChartOut(config=await generate_chart_config(generator, body.rows, body.question))
    except LexSQLError as e:
        raise _http_error(e)


@router.get("/suggestions", response_model=List[str])
def suggestions():
    return SUGGESTED_QUESTIONS
