"""
services/persistence_service.py
===============================
Heat-load documents per user and quote.

The server never recalculates; it stores whatever building, floors and results
the client sends. One document per ``(user_id, quote_id)``: saving again
updates it in place.
"""
from __future__ import annotations

import copy
import itertools
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

STORED_FIELDS = ("building", "pvHeatPump", "envelopeElements", "floors", "results", "projectMeta")


class HeatLoadValidationError(ValueError):
    """Request cannot be processed; ``status`` is the HTTP code to answer with."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.status = status


class HeatLoadNotFound(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HeatLoadRepository:
    """In-process document store; thread-safe for the Flask dev server."""

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._by_key: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()
        self._seq = itertools.count()

    def upsert(self, user_id: Optional[str], quote_id: Optional[str], payload: Mapping[str, Any]) -> Dict[str, Any]:
        if not user_id:
            raise HeatLoadValidationError("Unauthorized", status=401)
        if not quote_id:
            raise HeatLoadValidationError("quoteId is required", status=400)

        fields = {k: copy.deepcopy(payload[k]) for k in STORED_FIELDS if k in payload}
        key = (str(user_id), str(quote_id))
        with self._lock:
            doc_id = self._by_key.get(key)
            if doc_id is None:
                doc_id = uuid.uuid4().hex
                now = _now()
                self._docs[doc_id] = {
                    "_id": doc_id, "user": key[0], "quoteId": key[1],
                    "createdAt": now, "updatedAt": now, "_seq": next(self._seq), **fields,
                }
                self._by_key[key] = doc_id
                logger.info("Created heat-load %s for quote %s", doc_id, key[1])
            else:
                self._docs[doc_id].update(fields)
                self._docs[doc_id]["updatedAt"] = _now()
                logger.info("Updated heat-load %s for quote %s", doc_id, key[1])
            return copy.deepcopy(self._docs[doc_id])

    def get(self, doc_id: str, user_id: Optional[str]) -> Dict[str, Any]:
        """Document owned by ``user_id``; foreign or unknown ids are not found."""
        with self._lock:
            doc = self._docs.get(doc_id)
            if doc is None or not user_id or doc["user"] != str(user_id):
                raise HeatLoadNotFound("Not found or unauthorized")
            return copy.deepcopy(doc)

    def list_for_user(self, user_id: Optional[str]) -> List[Dict[str, Any]]:
        """Newest first."""
        if not user_id:
            raise HeatLoadValidationError("Unauthorized", status=401)
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._docs.values() if d["user"] == str(user_id)]
        return sorted(docs, key=lambda d: (d["createdAt"], d["_seq"]), reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()
            self._by_key.clear()
