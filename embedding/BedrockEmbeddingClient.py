# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: BedrockEmbeddingClient
# -----------------------------------------------------------------------------
import json
from typing import Any, Dict

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from config.Config import Config
from utility.errors import TransientProviderFailure, ValidationFailure
from utility.logging_utils import get_class_logger

VALIDATION_ERROR_CODES = {"ValidationException", "AccessDeniedException", "ResourceNotFoundException"}


class BedrockEmbeddingClient:
    """
    Thin wrapper over bedrock-runtime invoke_model.
    Returns the decoded response body; parsing happens in EmbeddingResponse.
    """

    provider = "bedrock"

    def __init__(self, cfg: Config, *, client=None, timeout_seconds: float = 30.0, logger=None):
        self.cfg = cfg
        self.model_id = cfg.embedding_model_id
        self.logger = logger or get_class_logger(self.__class__)
        self.client = client or boto3.client(
            "bedrock-runtime",
            region_name=cfg.aws_region,
            config=BotoConfig(
                read_timeout=timeout_seconds,
                connect_timeout=timeout_seconds,
                retries={"max_attempts": 1},
            ),
        )
        self.logger.info("Bedrock embedding client initialised (model=%s, region=%s)", self.model_id, cfg.aws_region)

    def build_request(self, text: str, input_type: str) -> Dict[str, Any]:
        mid = self.model_id.lower()
        if "cohere" in mid:
            if "embed-v4" in mid:
                return {"texts": [text], "input_type": input_type, "embedding_types": ["float"]}
            return {"texts": [text], "input_type": input_type, "truncate": "END"}
        # Titan and anything unrecognised
        return {"inputText": text}

    def invoke(self, text: str, input_type: str) -> Dict[str, Any]:
        body = json.dumps(self.build_request(text, input_type))
        try:
            resp = self.client.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=body,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in VALIDATION_ERROR_CODES:
                raise ValidationFailure(f"Bedrock rejected request ({code}): {e}") from e
            raise TransientProviderFailure(f"{code or 'ClientError'}: {e}", provider=self.provider) from e
        except BotoCoreError as e:
            raise TransientProviderFailure(str(e), provider=self.provider) from e

        raw = resp["body"].read() if hasattr(resp.get("body"), "read") else resp.get("body")
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ValidationFailure(f"Bedrock returned a non-JSON body: {e}") from e
