import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salesboard.core.config import settings
from salesboard.core.errors import SalesboardError
from salesboard.routes.auth import router as auth_router
from salesboard.routes.health import router as health_router
from salesboard.routes.admin import router as admin_router
from salesboard.routes.organizations import router as organizations_router
from salesboard.routes.catalog import stores_router, kpis_router
from salesboard.routes.sales import router as sales_router
from salesboard.routes.dashboard import router as dashboard_router
from salesboard.routes.import_export import router as import_export_router
from salesboard.routes.reports import router as reports_router
from salesboard.routes.rollups import router as rollups_router
from salesboard.routes.trends import router as trends_router
from salesboard.core.database import SessionLocal, init_db
from salesboard.services.seed import seed_demo


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Salesboard API", version="0.1.0")

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(SalesboardError)
    async def handle_domain_error(request: Request, exc: SalesboardError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("storage error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Storage error"})

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(admin_router, prefix="/admin", tags=["admin"])
    app.include_router(organizations_router, prefix="/organizations", tags=["organizations"])
    app.include_router(stores_router, prefix="/stores", tags=["stores"])
    app.include_router(kpis_router, prefix="/kpis", tags=["kpis"])
    app.include_router(sales_router, prefix="/sales", tags=["sales"])
    app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(import_export_router, prefix="/import", tags=["import-export"])
    app.include_router(reports_router, prefix="/reports", tags=["reports"])
    app.include_router(rollups_router, prefix="/rollups", tags=["rollups"])
    app.include_router(trends_router, prefix="/trends", tags=["trends"])

    return app


app = create_app()

# Only seed in development or when explicitly requested
if settings.env == "dev" or os.getenv("FORCE_SEED") == "true":
    init_db()
    with SessionLocal() as db:
        seed_demo(db)
