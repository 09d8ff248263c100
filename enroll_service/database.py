from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()
engine = None
SessionLocal = None

def make_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # sessions are handed across the request threadpool and the seeder thread
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)

def make_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)

def create_tables(bind):
    from enroll_service import models  # noqa: F401  registers the tables on Base
    Base.metadata.create_all(bind=bind)

def init_db(database_url: str):
    global engine, SessionLocal
    if engine is None:
        new_engine = make_engine(database_url)
        # globals are set only after create_all succeeds; a failed attempt leaves them unset
        create_tables(new_engine)
        engine = new_engine
        SessionLocal = make_session_factory(engine)
    return SessionLocal
