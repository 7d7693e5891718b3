from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.crud.server import create_server
from ..db.database import get_db
from ..dependencies import get_prober, require_user
from ..logger import logger
from ..models import AuthenticatedUser, ServerCreate, ServerPublic, StatusViewModel
from ..status import StatusProber, find_server_statuses

router = APIRouter(tags=["servers"])


@router.post("/servers", response_model=ServerPublic)
async def create_server_entry(
    request: ServerCreate,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        server = await create_server(
            db,
            name=request.name,
            host=request.host,
            port=request.port,
            info=request.info,
            bedrock_compatible=request.bedrockCompatible,
            geyser=request.geyser,
            created_by=user.id,
        )
    except (SQLAlchemyError, OverflowError) as e:
        logger.error(f"Failed to store server {request.name!r}: {e}", exc_info=True)
        await db.rollback()
        # The store's message goes back to the client unchanged
        return PlainTextResponse(str(e), status_code=500)

    logger.info(f"User {user.id} registered server {server.id} ({server.name})")
    return ServerPublic.from_record(server)


@router.get("/status", response_model=list[StatusViewModel])
async def get_status(
    db: AsyncSession = Depends(get_db),
    prober: StatusProber = Depends(get_prober),
):
    return await find_server_statuses(db, prober)


@router.get("/search", response_model=list[StatusViewModel])
async def search(
    q: str = "",
    db: AsyncSession = Depends(get_db),
    prober: StatusProber = Depends(get_prober),
):
    return await find_server_statuses(db, prober, q)
