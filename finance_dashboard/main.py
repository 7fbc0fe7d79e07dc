import logging
from datetime import date
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finance_dashboard.config import Settings, load_settings
from finance_dashboard.dashboard import build_dashboard
from finance_dashboard.errors import DashboardError
from finance_dashboard.notion_client import NotionClient, build_http_client
from finance_dashboard.schemas import DashboardResponse, ErrorResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("FinanceDashboard")

SETTINGS = load_settings()

app = FastAPI(title="Finance Dashboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[SETTINGS.frontend_origin],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        {"error": exc.message},
        status_code=exc.status_code,
        headers={"Cache-Control": "no-store"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "%s %s failed unexpectedly", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=500,
        headers={"Cache-Control": "no-store"},
    )


def get_settings() -> Settings:
    return SETTINGS


def get_today() -> date:
    return date.today()


async def get_record_fetcher(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[NotionClient]:
    settings.require()
    async with build_http_client(settings.notion_base_url) as client:
        yield NotionClient(
            token=settings.notion_token,
            client=client,
            notion_version=settings.notion_version,
        )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get(
    "/api/dashboard",
    response_model=DashboardResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def dashboard(
    response: Response,
    settings: Settings = Depends(get_settings),
    fetcher: NotionClient = Depends(get_record_fetcher),
    today: date = Depends(get_today),
) -> DashboardResponse:
    payload = await build_dashboard(fetcher, settings, today)
    response.headers["Cache-Control"] = f"public, max-age={settings.cache_max_age}"
    return payload
