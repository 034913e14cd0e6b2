from __future__ import annotations

from sqlalchemy import Boolean, DateTime, event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.expression import FunctionElement

from app.core.config import Settings

SQLITE_FOLD_FUNCTION = "text_fold"

class Base(DeclarativeBase):
    pass

class utcnow(FunctionElement):
    """Current UTC time as a naive timestamp, rendered per dialect."""
    type = DateTime()
    inherit_cache = True

@compiles(utcnow)
def _utcnow_default(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"

@compiles(utcnow, "postgresql")
def _utcnow_postgresql(element, compiler, **kw):
    return "TIMEZONE('utc', CURRENT_TIMESTAMP)"

@compiles(utcnow, "sqlite")
def _utcnow_sqlite(element, compiler, **kw):
    # Six fractional digits, the layout SQLAlchemy uses for bound datetimes
    return "strftime('%Y-%m-%d %H:%M:%f000', 'now')"

class icontains(FunctionElement):
    """``icontains(column, pattern)``: case-insensitive LIKE with ``\\`` as escape."""
    type = Boolean()
    inherit_cache = True

@compiles(icontains)
def _icontains_default(element, compiler, **kw):
    column, pattern = list(element.clauses)
    return compiler.process(column.ilike(pattern, escape="\\"), **kw)

@compiles(icontains, "sqlite")
def _icontains_sqlite(element, compiler, **kw):
    # SQLite's lower() only folds ASCII; text_fold is registered per connection
    column, pattern = list(element.clauses)
    col_sql = compiler.process(column, **kw)
    pattern_sql = compiler.process(pattern, **kw)
    return (
        f"{SQLITE_FOLD_FUNCTION}({col_sql}) LIKE {SQLITE_FOLD_FUNCTION}({pattern_sql}) ESCAPE '\\'"
    )

def _text_fold(value):
    return value.casefold() if isinstance(value, str) else value

def _register_sqlite_functions(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function(SQLITE_FOLD_FUNCTION, 1, _text_fold, deterministic=True)

def create_engine(cfg: Settings) -> AsyncEngine:
    kwargs = {"echo": False, "future": True}
    if not cfg.database_url.startswith("sqlite"):
        # Bounded pool with short checkout and recycle timeouts
        kwargs.update(
            pool_size=cfg.db_pool_size,
            max_overflow=0,
            pool_timeout=cfg.db_pool_timeout_seconds,
            pool_recycle=cfg.db_pool_recycle_seconds,
            pool_pre_ping=True,
        )
    engine = create_async_engine(cfg.database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        _register_sqlite_functions(engine)
    return engine

def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def init_models(engine: AsyncEngine) -> None:
    # Importing registers the tables on Base.metadata
    from app import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def ping(engine: AsyncEngine) -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        return False
    return True
