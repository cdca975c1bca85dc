import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession
from ...db import crud
from ...db.errors import PG_ERROR_MESSAGES, TABLE_ALREADY_CREATED, describe_db_error, error_code
from ...db.models import LegalPrompt
from ...db.session import get_engine, get_session, init_db
from ...schemas.prompts import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Pagination, PromptIn, PromptOut, PromptsPage, PromptUpdate

logger = logging.getLogger(__name__)


def _db_http_error(e: DBAPIError) -> HTTPException:
    code = error_code(e)
    logger.error("Prompt store error (code=%s): %s", code, e.orig)
    return HTTPException(status_code=400 if code in PG_ERROR_MESSAGES else 500, detail=describe_db_error(code))


async def ensure_table(engine: AsyncEngine = Depends(get_engine)) -> None:
    # created empty; only the query path seeds
    try:
        await init_db(engine)
    except DBAPIError as e:
        if error_code(e) not in TABLE_ALREADY_CREATED:
            raise _db_http_error(e)


router = APIRouter(prefix="/prompts", tags=["prompts"], dependencies=[Depends(ensure_table)])


async def _get_or_404(session: AsyncSession, prompt_id: int) -> LegalPrompt:
    prompt = await crud.get_prompt(session, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


@router.get("", response_model=PromptsPage)
async def list_all(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    category: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    if category == "all":
        category = None
    try:
        prompts, total = await crud.list_prompts(session, page=page, limit=limit, category=category)
    except DBAPIError as e:
        raise _db_http_error(e)
    return PromptsPage(
        prompts=[PromptOut.model_validate(p) for p in prompts],
        pagination=Pagination(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)),
    )


@router.post("", response_model=PromptOut, status_code=201)
async def create(body: PromptIn, session: AsyncSession = Depends(get_session)):
    try:
        return await crud.create_prompt(session, LegalPrompt(**body.model_dump()))
    except DBAPIError as e:
        raise _db_http_error(e)


@router.get("/{prompt_id}", response_model=PromptOut)
async def get_one(prompt_id: int, session: AsyncSession = Depends(get_session)):
    try:
        return await _get_or_404(session, prompt_id)
    except DBAPIError as e:
        raise _db_http_error(e)


@router.put("/{prompt_id}", response_model=PromptOut)
async def update(prompt_id: int, body: PromptUpdate, session: AsyncSession = Depends(get_session)):
    try:
        prompt = await _get_or_404(session, prompt_id)
        changes = body.model_dump(exclude_unset=True)
        # only the system message may be cleared
        changes = {k: v for k, v in changes.items() if v is not None or k == "system_message"}
        return await crud.update_prompt(session, prompt, changes)
    except DBAPIError as e:
        raise _db_http_error(e)


@router.delete("/{prompt_id}")
async def delete(prompt_id: int, session: AsyncSession = Depends(get_session)):
    try:
        prompt = await _get_or_404(session, prompt_id)
        await crud.delete_prompt(session, prompt)
    except DBAPIError as e:
        raise _db_http_error(e)
    return {"message": "Prompt deleted"}
