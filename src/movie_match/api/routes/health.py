"""Health check endpoint."""

import sqlalchemy as sa
from fastapi import APIRouter, Depends

from movie_match.api.deps import get_context
from movie_match.context import AppContext

router = APIRouter()


@router.get("/health")
async def health(ctx: AppContext = Depends(get_context)) -> dict:
    """Liveness plus a trivial database round trip."""
    async with ctx.session_factory() as session:
        await session.execute(sa.text("SELECT 1"))
    return {"status": "ok"}
