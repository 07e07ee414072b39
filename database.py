# =============================================================================
# 🗄️ database.py
# -----------------------------------------------------------------------------
# SQLAlchemy-Datenbankkonfiguration für QR Studio
# Standard: SQLite-Datei, beliebige SQLAlchemy-URL über QR_DATABASE_URL
# =============================================================================

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from utils import qr_config

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def create_db_engine(url: Optional[str] = None) -> Engine:
    """
    Erstellt die Engine. Die Verbindung wird erst beim ersten Zugriff aufgebaut.
    In-Memory-SQLite nutzt eine StaticPool, damit alle Sessions dieselbe DB sehen.
    """
    url = url or qr_config.DATABASE_URL

    if url.startswith("sqlite"):
        if url in _MEMORY_URLS:
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    # pool_pre_ping = erkennt automatisch unterbrochene Verbindungen
    # pool_recycle = hält Server-Verbindungen frisch
    return create_engine(url, pool_pre_ping=True, pool_recycle=280)


def create_session_factory(engine: Engine) -> sessionmaker:
    """SessionFactory – erzeugt eine Session pro Speicheroperation."""
    return sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)


# 🔹 Basisklasse für alle SQLAlchemy-Modelle
Base = declarative_base()
