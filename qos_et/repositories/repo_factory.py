# -*- coding: utf-8 -*-
"""
Repository factory - selects the storage backend.

``DATA_BACKEND=postgres`` selects the relational store; anything else the
embedded store. When PostgreSQL is requested but cannot be reached, the
embedded store is used instead and a warning is logged.
"""

from typing import Optional, Tuple

from qos_et.app.config import Config
from qos_et.services.exceptions import StorageUnavailableException
from qos_et.services.validation_service import ValidationService
from qos_et.utils.logger import get_logger
from .complaint_repository import ComplaintRepository
from .db_adapter import DatabaseAdapter, DatabaseConfig, DatabaseFactory, DatabaseType
from .local_complaint_repository import LocalComplaintRepository
from .relational_complaint_repository import RelationalComplaintRepository

logger = get_logger(__name__)

BACKEND_LOCAL = "local"
BACKEND_POSTGRES = "postgres"
BACKENDS = (BACKEND_LOCAL, BACKEND_POSTGRES)


def resolve_backend(backend: Optional[str] = None) -> str:
    """Normalise a backend name, defaulting to the configured one."""
    backend = (backend or Config.DATA_BACKEND or BACKEND_LOCAL).lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown data backend: {backend!r} (expected one of {', '.join(BACKENDS)})")
    return backend


def open_database(backend: Optional[str] = None,
                  config: Optional[DatabaseConfig] = None) -> Tuple[DatabaseAdapter, str]:
    """
    Open and initialise the database for a backend.

    Returns:
        (adapter, effective backend). The effective backend is ``local``
        when PostgreSQL was requested but unavailable.
    """
    backend = resolve_backend(backend)
    config = config or DatabaseConfig.from_env()
    config.db_type = DatabaseType.POSTGRESQL if backend == BACKEND_POSTGRES else DatabaseType.SQLITE

    adapter = DatabaseFactory.create(config)
    try:
        adapter.initialize()
    except StorageUnavailableException as e:
        if adapter.db_type != DatabaseType.POSTGRESQL:
            raise
        logger.warning(f"PostgreSQL schema setup failed, falling back to embedded store: {e}")
        adapter.close()
        config.db_type = DatabaseType.SQLITE
        adapter = DatabaseFactory.create(config)
        adapter.initialize()

    if backend == BACKEND_POSTGRES and adapter.db_type != DatabaseType.POSTGRESQL:
        logger.warning("Relational store unavailable; using the embedded store")
        backend = BACKEND_LOCAL
    return adapter, backend


def get_complaint_repository(db: Optional[DatabaseAdapter] = None,
                             backend: Optional[str] = None,
                             validation_service: Optional[ValidationService] = None) -> ComplaintRepository:
    """
    Build the complaint repository for a backend.

    Args:
        db: An open adapter. When omitted one is opened with fallback.
        backend: "local" or "postgres"; defaults to Config.DATA_BACKEND.
        validation_service: Shared validation gate.
    """
    if db is None:
        db, backend = open_database(backend)
    else:
        backend = resolve_backend(backend)

    if backend == BACKEND_POSTGRES:
        logger.info(f"Using relational complaint store ({db.db_type.value})")
        return RelationalComplaintRepository(db, validation_service)

    logger.info("Using embedded complaint store")
    return LocalComplaintRepository(db, validation_service)
