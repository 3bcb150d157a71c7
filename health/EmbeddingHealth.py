# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-02-02
# Description: EmbeddingHealth
# -----------------------------------------------------------------------------
import time
import logging
from typing import Any, Dict, Optional

from embedding.EmbeddingGenerator import EmbeddingGenerator
from utility.logging_utils import get_logger


class EmbeddingHealth:
    """
    Smoke test for the embedding model against the stored catalog.

    Verifies:
      - The embedding call completes successfully
      - The query vector dimension matches the business embeddings
    """

    def __init__(
        self,
        generator: EmbeddingGenerator,
        logger: Optional[logging.Logger] = None,
    ):
        self.generator = generator
        self.logger = logger or get_logger(__name__)
        self.last_report: Dict[str, Any] = {}

    def run(self) -> bool:
        self.logger.info("Running embedding healthcheck using model: %s", self.generator.model_id)

        start = time.time()
        report = self.generator.validate_embedding_dimensions("embedding healthcheck")
        elapsed_ms = (time.time() - start) * 1000.0
        self.last_report = report

        if not report["valid"]:
            self.logger.error("Embedding healthcheck FAILED: %s", report["issue"])
            if report.get("recommendation"):
                self.logger.error("Recommendation: %s", report["recommendation"])
            return False

        self.logger.info(
            "Embedding healthcheck PASSED in %.1f ms (dimensions=%d)",
            elapsed_ms,
            report["query_dimensions"],
        )
        return True


if __name__ == "__main__":
    from api.dependencies import get_app_container

    container = get_app_container()
    eh = EmbeddingHealth(container.generator)
    ok = eh.run()

    eh.logger.info("EmbeddingHealth result: %s", "PASS" if ok else "FAIL")
    container.stop()
