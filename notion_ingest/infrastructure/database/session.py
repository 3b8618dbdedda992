"""
Gestión de engine y sesiones de base de datos para el content store SQL.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str, echo: bool) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": echo,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in database_url:
        args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def create_store_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Crea el engine del content store."""
    return create_engine(database_url, **_create_engine_args(database_url, echo))


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory ligada al engine."""
    return sessionmaker(
        engine,
        expire_on_commit=False,
        autoflush=False,
    )


def init_db(engine: Engine) -> None:
    """Inicializa la base de datos creando todas las tablas."""
    # Importar modelos para registrarlos en Base.metadata
    from notion_ingest.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(engine)
