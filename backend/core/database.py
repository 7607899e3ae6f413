# backend/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .query_logger import setup_query_logging

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with the pool options appropriate for the backend"""
    engine_kwargs = {
        "echo": echo,
        "pool_pre_ping": True,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    new_engine = create_engine(database_url, **engine_kwargs)

    # Setup query logging in development
    setup_query_logging(new_engine)
    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = build_engine(settings.database_url, echo=settings.log_sql_queries)

SessionLocal = build_session_factory(engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Create all tables registered on Base (used by tests and local dev)"""
    # Import models so they register with Base.metadata
    from modules.orders.models import order_models  # noqa: F401
    from modules.menu.models import menu_models  # noqa: F401
    from modules.inventory.models import inventory_models  # noqa: F401
    from modules.settings.models import settings_models  # noqa: F401
    from modules.tax.models import tax_models  # noqa: F401
    from modules.tables.models import table_models  # noqa: F401
    from modules.reports.models import report_models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
