"""
Practice Service Factory
Centralizes the logic for selecting the catalog and state store adapters.
"""

import logging

from asma.application.config import AppConfig
from asma.application.practice_service import PracticeService
from asma.application.session_composer import SessionOrdering
from asma.domain.ports import CatalogProvider, StateStore
from asma.infrastructure.catalog import BundledCatalog, RemoteCatalog
from asma.infrastructure.stores import JsonFileStateStore

logger = logging.getLogger(__name__)


def get_catalog(config: AppConfig) -> CatalogProvider:
    """
    Returns the configured CatalogProvider. The remote catalog always falls
    back to the bundled dataset.
    """
    bundled = BundledCatalog()
    if config.catalog_source == "remote":
        return RemoteCatalog(
            url=config.catalog_url,
            fallback=bundled,
            timeout=config.request_timeout,
        )
    return bundled


def get_state_store(config: AppConfig) -> StateStore:
    return JsonFileStateStore(config.state_dir, user_id=config.user_id)


def get_practice_service(config: AppConfig) -> PracticeService:
    logger.debug(
        f"Practice service: catalog={config.catalog_source} state_dir={config.state_dir}"
    )
    return PracticeService(
        catalog=get_catalog(config),
        store=get_state_store(config),
        target_duration_seconds=config.target_duration_seconds,
        ordering=SessionOrdering(config.ordering),
    )
