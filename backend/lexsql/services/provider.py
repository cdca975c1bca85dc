import logging
from functools import lru_cache
from typing import Type, TypeVar

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from ..core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def make_llm(provider: str | None = None, temperature: float | None = None) -> BaseChatModel:
    provider = (provider or settings.LLM_PROVIDER).lower()
    temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
    if provider == "ollama":
        return ChatOllama(model=settings.OLLAMA_MODEL, base_url=settings.OLLAMA_HOST, temperature=temperature)
    if provider == "openai":
        return ChatOpenAI(model=settings.OPENAI_MODEL, api_key=settings.OPENAI_API_KEY, temperature=temperature)
    raise ValueError(f"Unknown LLM provider: {provider}")


class StructuredGenerator:
    """Ask a chat model for output matching a pydantic schema.

    The rest of the pipeline only depends on ``generate``; tests pass an
    object with the same coroutine returning canned values.
    """

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def generate(self, system: str, prompt: str, schema: Type[T]) -> T:
        structured = self.llm.with_structured_output(schema)
        result = await structured.ainvoke([SystemMessage(content=system), HumanMessage(content=prompt)])
        if result is None:
            raise ValueError(f"Model returned no {schema.__name__}")
        if isinstance(result, dict):
            result = schema.model_validate(result)
        logger.debug("Structured %s: %s", schema.__name__, result)
        return result


@lru_cache
def get_generator() -> StructuredGenerator:
    return StructuredGenerator(make_llm())
