from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

Scalar = Union[str, int, float, bool, None]
Row = Dict[str, Scalar]


# What the language model is asked to return

class GeneratedQuery(BaseModel):
    query: str = Field(description="A single PostgreSQL SELECT statement")


class QueryExplanation(BaseModel):
    section: str = Field(description="A fragment of the SQL query, verbatim")
    explanation: Optional[str] = Field(default="", description="Plain-language explanation, may be empty")

    @field_validator("explanation", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return "" if value is None else value


class QueryExplanations(BaseModel):
    explanations: List[QueryExplanation]


class ChartSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(description="Chart kind: bar, line, area or pie")
    x_key: str = Field(alias="xKey", description="Column used for the category axis")
    y_keys: List[str] = Field(alias="yKeys", description="Columns plotted as series")
    legend: Optional[bool] = None
    multiple_lines: Optional[bool] = Field(default=None, alias="multipleLines")
    measurement_column: Optional[str] = Field(default=None, alias="measurementColumn")


class ChartConfig(ChartSuggestion):
    colors: Dict[str, str] = Field(default_factory=dict)
    legend: bool = False


# API bodies

class NLQuery(BaseModel):
    question: str = Field(min_length=1)
    chart: bool = True


class NLResult(BaseModel):
    sql: str
    columns: List[str]
    rows: List[Row]
    chart: Optional[ChartConfig] = None
    chart_error: Optional[str] = None


class RunQuery(BaseModel):
    query: str = Field(min_length=1)


class RowsOut(BaseModel):
    columns: List[str]
    rows: List[Row]


class ExplainIn(BaseModel):
    question: str
    sql: str = Field(min_length=1)


class ExplainOut(BaseModel):
    explanations: List[QueryExplanation]


class ChartIn(BaseModel):
    question: str
    rows: List[Dict[str, Any]]


class ChartOut(BaseModel):
    config: ChartConfig


def columns_of(rows: List[Row]) -> List[str]:
    return list(rows[0].keys()) if rows else []
