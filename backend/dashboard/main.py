from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.cors import CORSMiddleware

from .audit import OperationAuditMiddleware
from .config import settings
from .db.database import init_db
from .dependencies import LoginRequired
from .logger import logger
from .routers import auth, frontend, servers


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up and initializing the database...")
    await init_db()
    logger.info("Startup complete.")
    yield


app = FastAPI(lifespan=lifespan, title=settings.title)

# 注意顺序：后添加的中间件先执行
app.add_middleware(OperationAuditMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return PlainTextResponse("Login required", status_code=401)


app.include_router(auth.router)
app.include_router(servers.router)
app.include_router(frontend.router)
