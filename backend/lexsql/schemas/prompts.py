from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

FIELD_LIMITS = {"name": 100, "prompt": 5000, "category": 50}
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _clean(value: Optional[str], field: str, required: bool) -> Optional[str]:
    if value is None:
        if required:
            raise ValueError(f"{field.capitalize()} is required")
        return None
    if not isinstance(value, str):
        return value  # let the str type check report it
    value = value.strip()
    if not value:
        raise ValueError(f"{field.capitalize()} is required")
    limit = FIELD_LIMITS[field]
    if len(value) > limit:
        raise ValueError(f"{field.capitalize()} must be {limit} characters or less")
    return value


class PromptIn(BaseModel):
    name: str
    prompt: str
    category: str
    system_message: Optional[str] = None

    @field_validator("name", "prompt", "category", mode="before")
    @classmethod
    def _required(cls, value, info):
        return _clean(value, info.field_name, required=True)


class PromptUpdate(BaseModel):
    name: Optional[str] = None
    prompt: Optional[str] = None
    category: Optional[str] = None
    system_message: Optional[str] = None

    @field_validator("name", "prompt", "category", mode="before")
    @classmethod
    def _optional(cls, value, info):
        return _clean(value, info.field_name, required=False)


class PromptOut(BaseModel):
    id: int
    name: str
    prompt: str
    category: str
    created_at: datetime
    system_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PromptsPage(BaseModel):
    prompts: List[PromptOut]
    pagination: Pagination
