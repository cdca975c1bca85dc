import pytest

from lexsql.core.errors import ExplanationFailure, GenerationFailure, ValidationFailure
from lexsql.schemas.query import GeneratedQuery, QueryExplanations
from lexsql.services.explain import explain_query
from lexsql.services.nl2sql import generate_query


# =========================
# Query generator
# =========================
@pytest.mark.asyncio
async def test_generate_query_normalizes_columns(fake_generator):
    fake_generator.responses[GeneratedQuery] = {
        "query": "  select name, createdat from legalprompt order by created_at desc  "
    }

    sql = await generate_query(fake_generator, "Show the latest legal prompt added")

    assert sql == 'select name, "createdAt" from legalprompt order by "createdAt" desc'


@pytest.mark.asyncio
async def test_generate_query_sends_schema_and_question(fake_generator):
    fake_generator.responses[GeneratedQuery] = {"query": "SELECT COUNT(*) AS count FROM legalprompt"}

    await generate_query(fake_generator, "Display the total number of legal prompts")

    call = fake_generator.calls[0]
    assert call["schema"] is GeneratedQuery
    assert "legalprompt" in call["system"]
    assert '"createdAt"' in call["system"]
    assert "Display the total number of legal prompts" in call["prompt"]


@pytest.mark.asyncio
async def test_generate_query_rejects_write(fake_generator):
    fake_generator.responses[GeneratedQuery] = {"query": "DELETE FROM legalprompt"}

    with pytest.raises(GenerationFailure) as exc:
        await generate_query(fake_generator, "remove everything")

    assert exc.value.message == "Failed to generate query"
    assert isinstance(exc.value.__cause__, ValidationFailure)


@pytest.mark.asyncio
async def test_generate_query_upstream_error(fake_generator):
    fake_generator.responses[GeneratedQuery] = ConnectionError("model unreachable")

    with pytest.raises(GenerationFailure):
        await generate_query(fake_generator, "anything")


@pytest.mark.asyncio
async def test_generate_query_empty_query(fake_generator):
    fake_generator.responses[GeneratedQuery] = {"query": "   "}

    with pytest.raises(GenerationFailure):
        await generate_query(fake_generator, "anything")


# =========================
# Explanation generator
# =========================
@pytest.mark.asyncio
async def test_explanations_follow_query_order(fake_generator):
    fake_generator.responses[QueryExplanations] = {
        "explanations": [
            {"section": "FROM legalprompt", "explanation": "Reads the legal prompts table."},
            {"section": "SELECT *", "explanation": ""},
            {"section": "LIMIT 20", "explanation": "Keeps the first 20 rows."},
        ]
    }

    result = await explain_query(fake_generator, "first twenty prompts", "SELECT * FROM legalprompt LIMIT 20")

    assert [e.section for e in result] == ["SELECT *", "FROM legalprompt", "LIMIT 20"]
    assert result[0].explanation == ""


@pytest.mark.asyncio
async def test_missing_explanation_becomes_empty_string(fake_generator):
    fake_generator.responses[QueryExplanations] = {
        "explanations": [{"section": "SELECT name"}, {"section": "FROM legalprompt", "explanation": "Table."}]
    }

    result = await explain_query(fake_generator, "names", "SELECT name FROM legalprompt")

    assert len(result) == 2
    assert result[0].explanation == ""


@pytest.mark.asyncio
async def test_null_explanation_becomes_empty_string(fake_generator):
    fake_generator.responses[QueryExplanations] = {
        "explanations": [
            {"section": "SELECT *", "explanation": None},
            {"section": "FROM legalprompt", "explanation": "Reads the legal prompts table."},
        ]
    }

    result = await explain_query(fake_generator, "everything", "SELECT * FROM legalprompt")

    assert [e.section for e in result] == ["SELECT *", "FROM legalprompt"]
    assert result[0].explanation == ""


@pytest.mark.asyncio
async def test_explanation_prompt_carries_question_and_sql(fake_generator):
    fake_generator.responses[QueryExplanations] = {"explanations": []}

    await explain_query(fake_generator, "how many prompts?", "SELECT COUNT(*) FROM legalprompt")

    prompt = fake_generator.calls[0]["prompt"]
    assert "how many prompts?" in prompt
    assert "SELECT COUNT(*) FROM legalprompt" in prompt


@pytest.mark.asyncio
async def test_explanation_upstream_error(fake_generator):
    fake_generator.responses[QueryExplanations] = TimeoutError("slow model")

    with pytest.raises(ExplanationFailure) as exc:
        await explain_query(fake_generator, "q", "SELECT 1")

    assert exc.value.message == "Failed to generate query explanation"
