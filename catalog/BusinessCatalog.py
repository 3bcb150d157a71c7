# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: BusinessCatalog
# -----------------------------------------------------------------------------
import threading
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from document.Business import Business


@runtime_checkable
class BusinessCatalog(Protocol):
    """
    Read side of the business document store.

    list_business_ids is metadata-only: reconciliation uses it to scan the
    catalog without loading records.
    """

    def get_business(self, business_id: str) -> Optional[Business]:
        ...

    def list_business_ids(self) -> List[str]:
        ...

    def query_businesses(
            self,
            *,
            category: Optional[str] = None,
            city: Optional[str] = None,
            limit: Optional[int] = None,
    ) -> List[Business]:
        ...


class InMemoryBusinessCatalog:
    """Dict-backed catalog for local runs and tests."""

    def __init__(self, businesses: Iterable[Business] = ()):
        self._lock = threading.Lock()
        self._items: Dict[str, Business] = {b.business_id: b for b in businesses}

    def put_business(self, business: Business) -> None:
        with self._lock:
            self._items[business.business_id] = business

    def delete_business(self, business_id: str) -> bool:
        with self._lock:
            return self._items.pop(business_id, None) is not None

    def get_business(self, business_id: str) -> Optional[Business]:
        with self._lock:
            return self._items.get(business_id)

    def list_business_ids(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())

    def query_businesses(
            self,
            *,
            category: Optional[str] = None,
            city: Optional[str] = None,
            limit: Optional[int] = None,
    ) -> List[Business]:
        with self._lock:
            items = list(self._items.values())

        out: List[Business] = []
        for b in items:
            if category and b.category.lower() != category.lower():
                continue
            if city and b.city.lower() != city.lower():
                continue
            out.append(b)
            if limit is not None and len(out) >= limit:
                break
        return out
