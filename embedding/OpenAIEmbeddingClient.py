# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-28
# Description: OpenAIEmbeddingClient
# -----------------------------------------------------------------------------
from typing import Any, Dict

import openai
from openai import AzureOpenAI, OpenAI

from config.Config import Config
from utility.errors import TransientProviderFailure, ValidationFailure
from utility.logging_utils import get_class_logger


class OpenAIEmbeddingClient:
    """
    Embeddings via OpenAI or Azure OpenAI. Azure is used when both its key
    and endpoint are configured; the model id doubles as the deployment name.
    """

    provider = "openai"

    def __init__(self, cfg: Config, *, client=None, api_version: str = "2024-10-21", logger=None):
        self.cfg = cfg
        self.model_id = cfg.embedding_model_id
        self.logger = logger or get_class_logger(self.__class__)

        if client is not None:
            self.client = client
        elif cfg.uses_azure_openai:
            self.client = AzureOpenAI(
                api_key=cfg.openai_azure_api_key,
                azure_endpoint=cfg.openai_azure_endpoint,
                api_version=api_version,
            )
        else:
            self.client = OpenAI(
                api_key=cfg.openai_api_key,
                base_url=cfg.openai_base_url or None,
            )
        self.logger.info(
            "OpenAI embedding client initialised (model=%s, azure=%s)",
            self.model_id,
            cfg.uses_azure_openai,
        )

    def invoke(self, text: str, input_type: str) -> Dict[str, Any]:
        # input_type only matters to Cohere-style models
        try:
            resp = self.client.embeddings.create(model=self.model_id, input=[text])
        except openai.BadRequestError as e:
            raise ValidationFailure(f"OpenAI rejected request: {e}") from e
        except openai.APIError as e:
            raise TransientProviderFailure(str(e), provider=self.provider) from e

        return {"data": [{"embedding": list(d.embedding)} for d in resp.data]}
