from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, DateTime, Text, func
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    # "createdAt" is a TIMESTAMP without time zone
    return datetime.now(timezone.utc).replace(tzinfo=None)


class LegalPrompt(SQLModel, table=True):
    __tablename__ = "legalprompt"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    prompt: str = Field(sa_column=Column(Text, nullable=False))
    category: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime, nullable=False, server_default=func.now()),
    )
    system_message: Optional[str] = Field(
        default=None, sa_column=Column("systemMessage", Text, nullable=True)
    )


# Rows inserted the first time the table is created on demand.
SEED_PROMPTS = [
    {"name": "Prompt 1", "prompt": "This is the first prompt", "category": "Category 1", "systemMessage": "System message 1"},
    {"name": "Prompt 2", "prompt": "This is the second prompt", "category": "Category 2", "systemMessage": "System message 2"},
    {"name": "Prompt 3", "prompt": "This is the third prompt", "category": "Category 3", "systemMessage": None},
]
