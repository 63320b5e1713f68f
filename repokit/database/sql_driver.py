from typing import Iterator
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, Session, create_engine
from .base import BaseDatabaseDriver

class SQLDriver(BaseDatabaseDriver):
    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.engine = create_engine(url, echo=echo, **engine_kwargs)
        self.session_factory = sessionmaker(
            self.engine, class_=Session, expire_on_commit=False
        )

    def connect(self):
        """Check the database answers (the engine manages pooled connections)."""
        with self.engine.begin() as conn:
            conn.execute(text("SELECT 1"))

    def disconnect(self):
        """Dispose pooled connections."""
        self.engine.dispose()

    def create_all(self):
        """Create every table registered on SQLModel metadata."""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Iterator[Session]:
        with self.session_factory() as session:
            yield session
