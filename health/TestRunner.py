# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-02-02
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from health.EmbeddingHealth import EmbeddingHealth
from utility.logging_utils import get_class_logger


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - embedding    (model reachable, dimensions agree with the catalog)
      - vector_store (embedding store reachable)
      - cache        (generic cache round-trip)
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        *,
        embedding_health: EmbeddingHealth,
        store_check: Callable[[], bool],
        cache_check: Callable[[], bool],
        logger: Optional[logging.Logger] = None,
    ):
        self.embedding_health = embedding_health
        self.store_check = store_check
        self.cache_check = cache_check
        self.logger = logger or get_class_logger(self.__class__)

    # -------------------------------------------------------------------------
    def run_all(self, run_embedding: bool = True) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :param run_embedding: If False, skips the (billable) embedding call.
        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite (run_embedding=%s)", run_embedding)

        checks: Dict[str, Callable[[], bool]] = {
            "vector_store": self.store_check,
            "cache": self.cache_check,
        }
        if run_embedding:
            checks["embedding"] = self.embedding_health.run

        results: Dict[str, bool] = {}
        for name, check in checks.items():
            try:
                results[name] = bool(check())
            except Exception as e:
                self.logger.exception("Smoke test '%s' raised: %s", name, e)
                results[name] = False

        passed = sum(1 for ok in results.values() if ok)
        self.logger.info("Smoke tests complete: %d/%d passed", passed, len(results))
        return results
