# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-16
# Updated: 2026-01-29
# Description: ChromaEmbeddingStore
# -----------------------------------------------------------------------------
import re
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import chromadb
from chromadb import ClientAPI
from chromadb.api.models import Collection

from config.Config import Config
from embedding.EmbeddingRecord import BusinessEmbeddingRecord
from utility.logging_utils import get_class_logger

ID_PAGE_SIZE = 1000


def _build_client(cfg: Config) -> ClientAPI:
    if cfg.chroma_mode == "cloud":
        return chromadb.CloudClient(
            tenant=cfg.chroma_tenant,
            database=cfg.chroma_database,
            api_key=cfg.chroma_api_key,
        )
    if cfg.chroma_mode == "ephemeral":
        return chromadb.EphemeralClient()
    return chromadb.PersistentClient(path=cfg.chroma_path)


def _field(res: Dict[str, Any], key: str) -> List[Any]:
    # Chroma may hand back numpy arrays here, so no truthiness tests
    value = res.get(key)
    return [] if value is None else list(value)


class ChromaEmbeddingStore:
    """
    Business embeddings in Chroma, one collection per embedding version.
    Document id is the business id; the source text rides along as the document.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            client: Optional[ClientAPI] = None,
            clock: Callable[[], float] = time.time,
            logger=None,
    ):
        self.cfg = cfg
        self.logger = logger or get_class_logger(self.__class__)
        self._clock = clock
        self._lock = threading.Lock()
        self._collections: Dict[str, Collection] = {}

        self.logger.info(
            "Initialising Chroma client (mode=%s, tenant=%s, database=%s)",
            cfg.chroma_mode,
            cfg.chroma_tenant,
            cfg.chroma_database,
        )
        self.client: ClientAPI = client or _build_client(cfg)

    def collection_name(self, version: str) -> str:
        name = f"{self.cfg.chroma_collection_prefix}-{version}"
        name = re.sub(r"[^a-zA-Z0-9._-]", "-", name)[:63]
        return name.strip("-._")

    def collection(self, version: str) -> Collection:
        with self._lock:
            coll = self._collections.get(version)
            if coll is None:
                name = self.collection_name(version)
                coll = self.client.get_or_create_collection(
                    name=name,
                    metadata={"hnsw:space": "cosine", "embedding_version": version},
                )
                self._collections[version] = coll
                self.logger.info("Chroma collection ready: '%s'", name)
            return coll

    def test_connection(self) -> bool:
        """Simple health check: can we talk to Chroma?"""
        try:
            self.client.heartbeat()
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    def put(
            self,
            business_id: str,
            version: str,
            vector: Sequence[float],
            source_text: Optional[str] = None,
    ) -> BusinessEmbeddingRecord:
        vec = vector.tolist() if hasattr(vector, "tolist") else [float(x) for x in vector]
        record = BusinessEmbeddingRecord(
            business_id=business_id,
            version=version,
            vector=vec,
            last_updated=self._clock(),
            source_text=source_text,
        )
        self.collection(version).upsert(
            ids=[business_id],
            embeddings=[vec],
            documents=[source_text or ""],
            metadatas=[{
                "business_id": business_id,
                "version": version,
                "last_updated": record.last_updated,
                "dimensions": len(vec),
            }],
        )
        self.logger.debug("Upserted embedding for '%s' (version=%s, dims=%d)", business_id, version, len(vec))
        return record

    def _records(self, res: Dict[str, Any], version: str) -> List[BusinessEmbeddingRecord]:
        ids = _field(res, "ids")
        embeddings = _field(res, "embeddings")
        documents = _field(res, "documents")
        metadatas = _field(res, "metadatas")

        out: List[BusinessEmbeddingRecord] = []
        for i, bid in enumerate(ids):
            meta = metadatas[i] if i < len(metadatas) and metadatas[i] else {}
            doc = documents[i] if i < len(documents) else None
            out.append(BusinessEmbeddingRecord(
                business_id=bid,
                version=version,
                vector=[float(x) for x in embeddings[i]],
                last_updated=float(meta.get("last_updated", 0.0)),
                source_text=doc or None,
            ))
        return out

    def get(self, business_id: str, version: str) -> Optional[BusinessEmbeddingRecord]:
        res = self.collection(version).get(
            ids=[business_id],
            include=["embeddings", "documents", "metadatas"],
        )
        records = self._records(res, version)
        return records[0] if records else None

    def get_many(self, business_ids: Sequence[str], version: str) -> Dict[str, BusinessEmbeddingRecord]:
        ids = list(dict.fromkeys(business_ids))
        if not ids:
            return {}
        res = self.collection(version).get(
            ids=ids,
            include=["embeddings", "documents", "metadatas"],
        )
        return {r.business_id: r for r in self._records(res, version)}

    def has(self, business_id: str, version: str) -> bool:
        res = self.collection(version).get(ids=[business_id], include=[])
        return len(_field(res, "ids")) > 0

    def sample(self, version: str) -> Optional[BusinessEmbeddingRecord]:
        res = self.collection(version).get(
            limit=1,
            include=["embeddings", "documents", "metadatas"],
        )
        records = self._records(res, version)
        return records[0] if records else None

    def list_business_ids(self, version: str) -> List[str]:
        """Metadata-only scan of every business id stored for the version."""
        coll = self.collection(version)
        ids: List[str] = []
        offset = 0
        while True:
            res = coll.get(include=["metadatas"], limit=ID_PAGE_SIZE, offset=offset)
            page = _field(res, "ids")
            ids.extend(page)
            if len(page) < ID_PAGE_SIZE:
                break
            offset += ID_PAGE_SIZE
        return ids

    def delete(self, business_id: str, version: str) -> bool:
        coll = self.collection(version)
        if not self.has(business_id, version):
            return False
        try:
            coll.delete(ids=[business_id])
        except Exception as e:
            self.logger.error("Failed to delete embedding for '%s' (version=%s): %s", business_id, version, e)
            raise
        self.logger.info("Deleted embedding for '%s' (version=%s)", business_id, version)
        return True
