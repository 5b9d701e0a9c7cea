# barber_booking/db.py

from sqlmodel import SQLModel, create_engine, Session

from barber_booking.config import settings

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # required for SQLite + FastAPI

# Engine = connection to the database
engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    connect_args=connect_args,
)


def init_db() -> None:
    """Create tables if missing."""
    import barber_booking.models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
