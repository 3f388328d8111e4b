import json
import logging
import math

from sqlalchemy import Float, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql.functions import FunctionElement

from .config import DATABASE_URL, DB_POOL_SIZE

logger = logging.getLogger(__name__)

Base = declarative_base()


class cosine_distance(FunctionElement):
    """Cosine distance between two vector expressions.

    Rendered as pgvector's ``<=>`` operator on PostgreSQL and as a plain
    ``cosine_distance(a, b)`` call elsewhere (SQLite registers a Python
    implementation on connect).
    """

    type = Float()
    name = "cosine_distance"
    inherit_cache = True


@compiles(cosine_distance)
def _compile_cosine_distance(element, compiler, **kw):  # noqa: ANN001
    return "cosine_distance(%s)" % compiler.process(element.clauses, **kw)


@compiles(cosine_distance, "postgresql")
def _compile_cosine_distance_pg(element, compiler, **kw):  # noqa: ANN001
    left, right = list(element.clauses)
    return "(%s <=> %s)" % (compiler.process(left, **kw), compiler.process(right, **kw))


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b:
        return 0.0
    if len(a) != len(b):
        return 0.0
    dot = 0.0
    na = 0.0
    nb = 0.0
    for x, y in zip(a, b):
        dot += x * y
        na += x * x
        nb += y * y
    if na <= 0.0 or nb <= 0.0:
        return 0.0
    return float(dot / (math.sqrt(na) * math.sqrt(nb)))


def _sqlite_cosine_distance(a, b):  # noqa: ANN001
    if a is None or b is None:
        return None
    return 1.0 - cosine_similarity(json.loads(a), json.loads(b))


def _normalize_database_url(url: str) -> str:
    # Allow plain `postgresql://` / `postgres://` values and upgrade to the psycopg 3 driver.
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def create_db_engine(url: str | None = None, *, pool_size: int = DB_POOL_SIZE) -> Engine:
    db_url = _normalize_database_url((url or DATABASE_URL or "").strip())
    engine_kwargs = {"pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        # Needed for SQLite when used with FastAPI/uvicorn (multiple threads).
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        engine_kwargs["pool_size"] = pool_size
        engine_kwargs["max_overflow"] = 0

    engine = create_engine(db_url, **engine_kwargs)

    if db_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):  # noqa: ANN001
            dbapi_connection.create_function("cosine_distance", 2, _sqlite_cosine_distance, deterministic=True)
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    # Rows are handed back to handlers after commit, so keep their loaded state.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Import models so they register with SQLAlchemy metadata before create_all.
    from .models import banking, contact, event as event_model, news, note, place, recipe, tag, todo  # noqa: F401

    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
    Base.metadata.create_all(bind=engine)
