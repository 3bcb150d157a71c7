# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: test_embedding_providers.py
# -----------------------------------------------------------------------------
import io
import json
from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from config.Config import Config
from embedding.BedrockEmbeddingClient import BedrockEmbeddingClient
from embedding.OpenAIEmbeddingClient import OpenAIEmbeddingClient
from utility.errors import TransientProviderFailure, ValidationFailure


class StubBedrock:
    def __init__(self, body=None, error=None):
        self.body = body if body is not None else {"embedding": [0.1, 0.2]}
        self.error = error
        self.requests = []

    def invoke_model(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"body": io.BytesIO(json.dumps(self.body).encode("utf-8"))}


def _bedrock(model_id, stub):
    cfg = Config(embedding_provider="bedrock", embedding_model_id=model_id, aws_region="us-east-1")
    return BedrockEmbeddingClient(cfg, client=stub)


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": "nope"}}, "InvokeModel")


@pytest.mark.parametrize(
    "model_id, expected",
    [
        ("amazon.titan-embed-text-v2:0", {"inputText": "chai"}),
        (
            "cohere.embed-english-v3",
            {"texts": ["chai"], "input_type": "search_query", "truncate": "END"},
        ),
        (
            "cohere.embed-v4:0",
            {"texts": ["chai"], "input_type": "search_query", "embedding_types": ["float"]},
        ),
    ],
)
def test_bedrock_request_body_per_family(model_id, expected):
    stub = StubBedrock()
    _bedrock(model_id, stub).invoke("chai", "search_query")

    sent = stub.requests[0]
    assert sent["modelId"] == model_id
    assert json.loads(sent["body"]) == expected


def test_bedrock_returns_decoded_body():
    stub = StubBedrock(body={"embeddings": {"float": [[0.5, 0.5]]}})
    assert _bedrock("cohere.embed-v4:0", stub).invoke("x", "search_document") == {
        "embeddings": {"float": [[0.5, 0.5]]}
    }


@pytest.mark.parametrize("code", ["ValidationException", "AccessDeniedException"])
def test_bedrock_rejections_are_validation_failures(code):
    client = _bedrock("amazon.titan-embed-text-v2:0", StubBedrock(error=_client_error(code)))
    with pytest.raises(ValidationFailure):
        client.invoke("x", "search_query")


def test_bedrock_throttling_is_transient():
    client = _bedrock("amazon.titan-embed-text-v2:0", StubBedrock(error=_client_error("ThrottlingException")))
    with pytest.raises(TransientProviderFailure) as exc:
        client.invoke("x", "search_query")
    assert exc.value.provider == "bedrock"


def test_bedrock_network_error_is_transient():
    err = EndpointConnectionError(endpoint_url="https://bedrock-runtime.us-east-1.amazonaws.com")
    client = _bedrock("amazon.titan-embed-text-v2:0", StubBedrock(error=err))
    with pytest.raises(TransientProviderFailure):
        client.invoke("x", "search_query")


class StubEmbeddings:
    def __init__(self):
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(embedding=[0.3, 0.4, 0.5])])


def test_openai_returns_indexed_body():
    stub = SimpleNamespace(embeddings=StubEmbeddings())
    cfg = Config(embedding_provider="openai", embedding_model_id="text-embedding-3-small", aws_region="n/a")
    client = OpenAIEmbeddingClient(cfg, client=stub)

    assert client.invoke("masala dosa", "search_query") == {"data": [{"embedding": [0.3, 0.4, 0.5]}]}
    assert stub.embeddings.calls == [{"model": "text-embedding-3-small", "input": ["masala dosa"]}]
