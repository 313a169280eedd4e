#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
QOS-ET - Quality complaint data consistency core
Main entry point and top-level wiring.

The database is opened exactly once here and handed to every repository and
service that needs it.
"""

import sys
from dataclasses import dataclass
from typing import Optional

from qos_et.app.config import Config
from qos_et.controllers.complaint_controller import ComplaintController
from qos_et.repositories.complaint_repository import ComplaintRepository
from qos_et.repositories.db_adapter import DatabaseAdapter
from qos_et.repositories.repo_factory import get_complaint_repository, open_database
from qos_et.repositories.upload_history_repository import UploadHistoryRepository
from qos_et.services.dataset_health_service import get_dataset_health_summary, get_datasets_with_issues
from qos_et.services.import_service import ImportService
from qos_et.services.validation_service import ValidationService
from qos_et.utils.logger import setup_logger


@dataclass
class Application:
    """Wired components sharing one database handle."""
    db: DatabaseAdapter
    backend: str
    complaints: ComplaintRepository
    history: UploadHistoryRepository
    import_service: ImportService
    controller: ComplaintController

    def close(self):
        self.db.close()


def bootstrap(backend: Optional[str] = None, db: Optional[DatabaseAdapter] = None) -> Application:
    """
    Open the active store, create the schema and wire services.

    Args:
        backend: "local" or "postgres"; defaults to Config.DATA_BACKEND
        db: An already open adapter (its schema is initialised here)
    """
    if db is None:
        db, backend = open_database(backend)
    else:
        db.initialize()

    validation = ValidationService()
    complaints = get_complaint_repository(db, backend, validation)
    import_service = ImportService(complaints, validation)

    return Application(
        db=db,
        backend=complaints.backend_name,
        complaints=complaints,
        history=UploadHistoryRepository(db),
        import_service=import_service,
        controller=ComplaintController(complaints, import_service),
    )


def main():
    """Main application entry point."""
    logger = setup_logger()

    try:
        logger.info("=" * 80)
        logger.info(f"Starting {Config.APP_NAME} {Config.VERSION}")
        logger.info("=" * 80)

        app = bootstrap()
        logger.info(f">> Storage ready: {app.backend} store on {app.db.db_type.value}")
        if app.db.is_empty():
            logger.info(">> No complaints stored yet")

        summary = get_dataset_health_summary(app.history.list_uploads(), Config.STALE_THRESHOLD_DAYS)
        issues = get_datasets_with_issues(summary)
        for issue in issues:
            logger.warning(issue.message)
        if not issues:
            logger.info(">> All datasets are up to date")

        app.close()
        return 0

    except Exception as e:
        logger.exception(f"Fatal error during startup: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
