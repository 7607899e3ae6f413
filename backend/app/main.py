from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from core.config import get_settings, validate_production_config
from core.database import SessionLocal, init_db
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging
from app.container import build_services

# ========== Orders ==========
from modules.orders.routes.order_routes import router as order_router

# ========== Kitchen Display System (KDS) ==========
from modules.kds.routes.kds_routes import router as kds_router

# ========== Floor Status ==========
from modules.tables.routes.floor_routes import router as floor_router

# ========== Reports ==========
from modules.reports.routes.report_routes import router as report_router

logger = logging.getLogger(__name__)


def create_app(
    session_factory: Optional[sessionmaker] = None, create_tables: bool = False
) -> FastAPI:
    """
    Build the API around a session factory.

    Tests pass their own factory; the module-level app uses SessionLocal.
    """
    settings = get_settings()
    session_factory = session_factory or SessionLocal
    services = build_services(session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        validate_production_config(settings)
        if create_tables:
            init_db(bind=session_factory.kw.get("bind"))
        logger.info(f"Order coordination API started ({settings.environment})")
        yield
        # Ends every live view still attached
        services.feed.close_all()

    app = FastAPI(
        title="Restaurant Order Coordination API",
        description="""
    Order lifecycle coordination across POS terminals, the kitchen display,
    the expeditor view and the floor plan.

    * **Orders** - Cart submission, appends to open tables, discounts, tips, payment
    * **Kitchen Display System** - Dish-grouped work queue, item completion, bump, expo
    * **Floor Status** - Derived table status, occupancy and live revenue
    * **Reports** - Z report close-out
    """,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(order_router)
    app.include_router(kds_router)
    app.include_router(floor_router)
    app.include_router(report_router)

    @app.get("/", tags=["Health"])
    def read_root():
        return {"message": "Restaurant Order Coordination API is running"}

    return app


configure_logging()
app = create_app(create_tables=get_settings().is_sqlite)
