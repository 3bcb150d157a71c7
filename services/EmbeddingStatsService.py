# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-02-01
# Description: EmbeddingStatsService.py
# -----------------------------------------------------------------------------

import logging
from typing import Optional

from api.schemas.search import EmbeddingStatsResponse
from catalog.BusinessCatalog import BusinessCatalog
from jobqueue.EmbeddingJobQueue import EmbeddingJobQueue
from status.EmbeddingStatusTracker import EmbeddingStatusTracker
from utility.logging_utils import get_class_logger


class EmbeddingStatsService:
    """
    Embedding coverage for one version.

    Responsibilities:
      - count status rows against the catalog's business ids
      - attach live queue counts
    """

    def __init__(
        self,
        *,
        catalog: BusinessCatalog,
        status_tracker: EmbeddingStatusTracker,
        queue: EmbeddingJobQueue,
        default_version: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self.catalog = catalog
        self.status_tracker = status_tracker
        self.queue = queue
        self.default_version = default_version
        self.logger = logger or get_class_logger(self.__class__)

    def get_stats(self, version: Optional[str] = None) -> EmbeddingStatsResponse:
        version = version or self.default_version
        self.logger.info("Embedding stats for version='%s'", version)

        try:
            all_ids = self.catalog.list_business_ids()
        except Exception as e:
            self.logger.error("Failed to list business ids: %s", e)
            all_ids = None

        counts = self.status_tracker.stats(version, all_ids)
        return EmbeddingStatsResponse(version=version, queue=self.queue.stats(), **counts)
