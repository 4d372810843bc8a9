"""
Database configuration and session management
"""

from sqlmodel import Session, create_engine

from restaurant_pos.core.config import get_settings

settings = get_settings()

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    connect_args=connect_args,
)


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
