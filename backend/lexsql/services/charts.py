import json
import logging
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.errors import InvalidChartConfig, NoData
from ..schemas.query import ChartConfig, ChartSuggestion
from .provider import StructuredGenerator

logger = logging.getLogger(__name__)

PALETTE = ("#2563eb", "#16a34a", "#f97316", "#db2777", "#7c3aed")

CHART_SYSTEM = "You are a data visualization expert."

CHART_EXAMPLE = """{
  "type": "bar",
  "xKey": "month",
  "yKeys": ["sales", "profit", "expenses"],
  "legend": true
}"""


def build_chart_prompt(rows: List[Dict[str, Any]], question: str) -> str:
    return (
        "Given the following data from a SQL query result, generate the chart config that best "
        "visualizes the data and answers the user's query.\n"
        "Use one of: bar, line, area, pie. xKey and every entry of yKeys must be column names of the data.\n"
        "For multiple groups use multi-lines.\n\n"
        f"Here is an example complete config:\n{CHART_EXAMPLE}\n\n"
        f"User Query:\n{question}\n\n"
        f"Data:\n{json.dumps(rows, indent=2, default=str)}"
    )


def assign_colors(y_keys: List[str]) -> Dict[str, str]:
    return {key: PALETTE[i % len(PALETTE)] for i, key in enumerate(y_keys)}


async def generate_chart_config(
    generator: StructuredGenerator,
    rows: List[Dict[str, Any]],
    question: str,
    sample_size: Optional[int] = None,
) -> ChartConfig:
    if not rows:
        raise NoData()

    sample = rows[: sample_size or settings.CHART_SAMPLE_ROWS]
    logger.debug("Generating chart config for user query: %s", question)
    try:
        suggestion = await generator.generate(CHART_SYSTEM, build_chart_prompt(sample, question), ChartSuggestion)
    except Exception as e:
        logger.warning("Error generating chart config: %s", e)
        raise InvalidChartConfig() from e

    if not suggestion.y_keys:
        raise InvalidChartConfig("The chart suggestion has no data series")

    config = ChartConfig(
        type=suggestion.type,
        x_key=suggestion.x_key,
        y_keys=list(suggestion.y_keys),
        colors=assign_colors(suggestion.y_keys),
        legend=len(suggestion.y_keys) > 1,
        multiple_lines=suggestion.multiple_lines,
        measurement_column=suggestion.measurement_column,
    )
    logger.debug("Generated chart config: %s", config)
    return config
