# shared fixtures for server-side and end-to-end tests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import daybook.models  # noqa: F401
from daybook.db.database import Base, get_db
from daybook.main import app
from daybook.services.sessions import create_user

BASE_URL = "https://testserver"
USER_NAME = "hanako"
PASSWORD = "correct horse"


class ScratchDatabase:
    """
    Throwaway SQLite database wired into the app.

    The default in-memory URL shares one connection between every session;
    pass a file URL when requests run concurrently in the threadpool.
    """

    def __init__(self, url="sqlite://"):
        if url == "sqlite://":
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db

    def add_user(self, user_name=USER_NAME, password=PASSWORD) -> int:
        db = self.Session()
        try:
            return create_user(db, user_name, password).id
        finally:
            db.close()

    def close(self):
        app.dependency_overrides.pop(get_db, None)
        self.engine.dispose()
