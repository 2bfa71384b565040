# storefront/database.py
from sqlmodel import SQLModel, create_engine, Session

from storefront.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Client-state storage engine.
#
# SQLite needs check_same_thread=False because FastAPI runs sync
# handlers in a thread pool and sessions may be opened on any worker.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

connect_args = {}
if db_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    pool_pre_ping=True,
    connect_args=connect_args,
)


def create_db_and_tables() -> None:
    """
    Create the client_storage table if it does not exist.

    Called once from the app lifespan.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    One session per request; every persisted store of the request
    (cart, favorites, vehicle, auth) writes through it.
    """
    with Session(engine) as session:
        yield session
