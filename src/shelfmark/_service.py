"""FolderRanker: wires methods, cache and ranker; request boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from ._errors import ShelfmarkError
from ._ranker import SimilarityRanker

if TYPE_CHECKING:
    from ._cache import FingerprintCache, FolderSourceProvider
    from ._config import Settings
    from ._methods import MethodRegistry
    from ._types import FingerprintSet, RankedResult

log = structlog.get_logger(__name__)

SUGGEST = "SUGGEST"
REBUILD = "REBUILD"
INVALIDATE = "INVALIDATE"


class FolderRanker:
    """Main entry point. Holds the cache and exposes the public API."""

    def __init__(
        self,
        settings: Settings,
        methods: MethodRegistry,
        cache: FingerprintCache,
        source: FolderSourceProvider,
    ) -> None:
        self.settings = settings
        self.methods = methods
        self.cache = cache
        self.source = source
        self._ranker = SimilarityRanker(cache, methods, source)

    # -- Public API --

    async def suggest(
        self, query_text: str, method_id: str | None = None, k: int | None = None
    ) -> list[RankedResult]:
        """Top-k folders for ``query_text``, best first."""
        return await self._ranker.rank(
            query_text,
            method_id or self.settings.METHOD,
            k if k is not None else self.settings.DEFAULT_K,
        )

    async def rebuild(self, method_id: str | None = None) -> FingerprintSet:
        return await self.cache.rebuild(method_id or self.settings.METHOD, self.source)

    async def invalidate(self, method_id: str | None = None) -> None:
        await self.cache.invalidate(method_id or self.settings.METHOD)

    async def handle(self, request: dict[str, Any]) -> dict[str, Any]:
        """Serve one request dict; failures come back as ``{"error": ...}``.

        ``{"action": "SUGGEST", "queryText", "methodId"?, "k"?}``
            -> ``{"folders": [{"folderId", "name", "score"}, ...]}``
        ``{"action": "REBUILD" | "INVALIDATE", "methodId"?}`` -> ``{"ok": True}``
        """
        action = request.get("action")
        req_log = log.bind(action=action, method_id=request.get("methodId"))
        try:
            if action == SUGGEST:
                query_text = request.get("queryText")
                if not isinstance(query_text, str):
                    raise ValueError("queryText must be a string")
                k = request.get("k")
                if k is not None and (isinstance(k, bool) or not isinstance(k, int)):
                    raise ValueError("k must be an integer")
                results = await self.suggest(query_text, request.get("methodId"), k)
                return {"folders": [r.to_dict() for r in results]}
            if action == REBUILD:
                await self.rebuild(request.get("methodId"))
                return {"ok": True}
            if action == INVALIDATE:
                await self.invalidate(request.get("methodId"))
                return {"ok": True}
            raise ValueError(f"Unknown action {action!r}")
        except (ShelfmarkError, ValueError) as e:
            req_log.warning("Request failed.", error=str(e), error_type=type(e).__name__)
            return {"error": str(e)}
