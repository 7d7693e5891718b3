from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..config import settings
from ..dependencies import get_session_user
from ..models import AuthenticatedUser

router = APIRouter(tags=["frontend"])

templates = Jinja2Templates(directory=settings.web_path.resolve())


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    user: Optional[AuthenticatedUser] = Depends(get_session_user),
):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"user": user, "title": settings.title, "poll_interval_ms": 10000},
    )
