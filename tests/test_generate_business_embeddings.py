# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-03
# Description: test_generate_business_embeddings.py
# -----------------------------------------------------------------------------
import json

import pytest

from api.AppContainer import AppContainer
from cache.Cache import InMemoryCache
from config.Config import Config
from conftest import MODEL_ID, FakeGeocoder, FakeIPClient, FakeProvider
from scripts.generate_business_embeddings import main
from status.StatusRepository import InMemoryStatusRepository
from vectorstore.InMemoryEmbeddingStore import InMemoryEmbeddingStore


@pytest.fixture
def provider():
    return FakeProvider(dims=1024)


@pytest.fixture
def container(catalog, provider):
    app = AppContainer(
        Config(embedding_provider="bedrock", embedding_model_id=MODEL_ID, aws_region="us-east-1"),
        catalog=catalog,
        provider=provider,
        store=InMemoryEmbeddingStore(),
        cache=InMemoryCache(),
        status_repository=InMemoryStatusRepository(),
        geocoder=FakeGeocoder(),
        ip_client=FakeIPClient(),
    )
    yield app
    app.stop()


def test_dry_run(container, capsys):
    assert main(["--dry-run"], container=container) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["dry_run"] is True
    assert summary["targeted"] == 3
    assert summary["succeeded"] == 0


def test_backfill(container, capsys):
    assert main(["--batch-size", "2", "--retry-delay", "0"], container=container) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["succeeded"] == 3
    assert container.generator.has_embedding("b3")


def test_dimension_mismatch_aborts_without_regenerate(container, provider, capsys):
    main(["--retry-delay", "0"], container=container)
    capsys.readouterr()
    container.generator.invalidate_dimension_cache()
    provider.dims = 1536

    assert main([], container=container) == 2
    assert capsys.readouterr().out == ""
