from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine

from core.config import DATABASE_URL, LEDGER_TIMEOUT_SECONDS, SQL_ECHO


def make_engine(database_url: str, timeout_seconds: float = LEDGER_TIMEOUT_SECONDS, echo: bool = False) -> Engine:
    """
    Build an engine whose every blocking point is bounded by ``timeout_seconds``.

    Pool checkout uses ``pool_timeout``. SQLite waits on its busy handler for at
    most the same budget; PostgreSQL gets matching ``statement_timeout`` and
    ``lock_timeout`` so a stuck row lock surfaces as an error instead of a hang.
    """
    url = make_url(database_url)
    timeout_ms = int(timeout_seconds * 1000)

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": timeout_seconds},
        )

    connect_args = {}
    if url.get_backend_name() == "postgresql":
        connect_args = {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={timeout_ms} -c lock_timeout={timeout_ms}",
        }

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_timeout=timeout_seconds,
        connect_args=connect_args,
    )


# The Wire / Link That Lets Us Pass Data from App -> db
engine = make_engine(DATABASE_URL, echo=SQL_ECHO)


# Getter for this Wire, modified for FastAPI dependency injection
def get_engine() -> Engine:
    return engine
