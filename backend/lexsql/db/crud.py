from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from .models import LegalPrompt


async def create_prompt(session: AsyncSession, prompt: LegalPrompt) -> LegalPrompt:
    session.add(prompt)
    await session.commit()
    await session.refresh(prompt)
    return prompt


async def get_prompt(session: AsyncSession, prompt_id: int) -> Optional[LegalPrompt]:
    return await session.get(LegalPrompt, prompt_id)


async def list_prompts(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
) -> Tuple[List[LegalPrompt], int]:
    """Return one page of prompts, newest first, plus the total match count."""
    stmt = select(LegalPrompt)
    count_stmt = select(func.count()).select_from(LegalPrompt)
    if category:
        stmt = stmt.where(LegalPrompt.category == category)
        count_stmt = count_stmt.where(LegalPrompt.category == category)

    total = (await session.exec(count_stmt)).one()
    stmt = (
        stmt.order_by(LegalPrompt.created_at.desc(), LegalPrompt.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    prompts = (await session.exec(stmt)).all()
    return list(prompts), total


async def update_prompt(session: AsyncSession, prompt: LegalPrompt, changes: dict) -> LegalPrompt:
    for key, value in changes.items():
        setattr(prompt, key, value)
    session.add(prompt)
    await session.commit()
    await session.refresh(prompt)
    return prompt


async def delete_prompt(session: AsyncSession, prompt: LegalPrompt) -> None:
    await session.delete(prompt)
    await session.commit()
