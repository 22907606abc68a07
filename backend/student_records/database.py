"""
Connexion SQLAlchemy du backend local (mode BACKEND_MODE=local).
En production les données vivent dans Supabase ; cette base ne sert qu'au
développement hors ligne.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from student_records.config import settings


def make_engine(url: str):
    """Crée un moteur ; une base SQLite en mémoire est partagée entre toutes les sessions."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


engine = make_engine(settings.LOCAL_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_local_db(bind=None) -> None:
    """Crée les tables du backend local si elles n'existent pas."""
    import student_records.models  # noqa: F401 (enregistre les modèles dans Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
