import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storer.db_models import Base
from storer.errors import ClientConstructionError


logger = logging.getLogger(__name__)


def build_session_factory(database_url: str, *, name: str = "database") -> sessionmaker[Session]:
    try:
        url = make_url(database_url)
    except ArgumentError as exc:
        raise ClientConstructionError(f"error creating {name} client: invalid database url") from exc

    connect_args: dict[str, object] = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False

    try:
        engine = create_engine(url, future=True, connect_args=connect_args)
        Base.metadata.create_all(engine)
    except (SQLAlchemyError, ValueError) as exc:
        raise ClientConstructionError(f"error creating {name} client: {exc}") from exc

    logger.info("database ready", extra={"store": name, "dialect": url.get_backend_name()})
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
