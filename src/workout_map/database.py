from datetime import datetime
from zoneinfo import ZoneInfo

from loguru import logger
from sqlalchemy import Column, DateTime, String, Text, create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class StorageItem(Base):
    """One persisted value, addressed by key (the workouts live under "workout")."""

    __tablename__ = "storage"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    # timezone-aware UTC
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _sqlite_pragmas(dbapi_con, _con_record):
    cur = dbapi_con.cursor()
    cur.execute("PRAGMA journal_mode=WAL;")
    cur.execute("PRAGMA synchronous=NORMAL;")
    cur.close()


class DatabaseManager:
    """Key/value storage backed by SQLAlchemy. Every write is committed before returning."""

    def __init__(self, database_url: str):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.database_url = database_url
        self.engine = create_engine(
            database_url,
            echo=False,
            future=True,
            connect_args=connect_args,
            pool_pre_ping=True,
        )
        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _sqlite_pragmas)

        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def get_item(self, key: str) -> str | None:
        with self.Session() as session:
            item = session.get(StorageItem, key)
            return item.value if item is not None else None

    def set_item(self, key: str, value: str) -> None:
        with self.Session() as session:
            item = session.get(StorageItem, key)
            now = datetime.now(tz=ZoneInfo("UTC"))
            if item is None:
                session.add(StorageItem(key=key, value=value, updated_at=now))
            else:
                item.value = value
                item.updated_at = now
            session.commit()
        logger.debug("Stored {} ({} bytes)", key, len(value))

    def remove_item(self, key: str) -> None:
        with self.Session() as session:
            item = session.get(StorageItem, key)
            if item is not None:
                session.delete(item)
                session.commit()
        logger.debug("Removed {}", key)

    def close(self) -> None:
        self.engine.dispose()
