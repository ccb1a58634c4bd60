from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from directory_app.config import settings

# SQLite needs this to be shared with the worker threads FastAPI runs sync code on
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
