"""
Local store setup
SQLite database with SQLAlchemy, falling back to a fresh file and then to
memory when the existing store cannot be opened
"""
import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base

logger = logging.getLogger("db")

STORE_FILENAME = "afcon2025.store"
IN_MEMORY_URL = "sqlite://"


class StoreUnavailableError(Exception):
    """Neither a file-backed nor an in-memory store could be created."""


@dataclass
class Store:
    """An opened store: engine, session factory and where it lives."""
    engine: Engine
    session_factory: sessionmaker
    url: str
    in_memory: bool = False

    def session(self) -> Session:
        """
        Get a database session
        Remember to close() when done
        """
        return self.session_factory()

    def close(self) -> None:
        self.engine.dispose()


def _open(url: str, in_memory: bool = False) -> Store:
    kwargs = {"poolclass": StaticPool} if in_memory else {}
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
        echo=False,
        **kwargs,
    )
    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        engine.dispose()
        raise
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return Store(engine=engine, session_factory=factory, url=url, in_memory=in_memory)


def _delete_store_files(store_path: Path) -> None:
    for path in (
        store_path,
        store_path.with_name(store_path.name + "-shm"),
        store_path.with_name(store_path.name + "-wal"),
    ):
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Could not delete {path}: {e}")


def open_store(directory: Path, filename: str = STORE_FILENAME) -> Store:
    """
    Open the local store under ``directory``.

    Order of attempts:
    1. the existing store file
    2. a fresh file, after deleting the old one and its -shm/-wal files
    3. an in-memory store

    Raises:
        StoreUnavailableError: if even the in-memory store fails
    """
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create store directory {directory}: {e}")

    store_path = directory / filename
    url = f"sqlite:///{store_path}"

    try:
        store = _open(url)
        logger.info(f"Local store initialized at: {store_path}")
        return store
    except SQLAlchemyError as e:
        logger.warning(f"File storage failed, deleting old database: {e}")

    _delete_store_files(store_path)

    try:
        store = _open(url)
        logger.info(f"Local store initialized with fresh database at: {store_path}")
        return store
    except SQLAlchemyError as e:
        logger.warning(f"Still failed, using in-memory storage: {e}")

    try:
        return _open(IN_MEMORY_URL, in_memory=True)
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Could not create local store: {e}") from e


def open_memory_store() -> Store:
    """In-memory store, for tests and scripts."""
    return _open(IN_MEMORY_URL, in_memory=True)
