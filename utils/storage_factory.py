# utils/storage_factory.py
# =============================================================================
# 🏭 StorageFactory
# Wählt einmalig den Speicher: SQL-Datenbank, wenn sie erreichbar ist,
# sonst den flachen JSON-Speicher. Die Wahl wird nie neu bewertet.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from utils.environment import Environment, detect_environment
from utils.flat_storage import FlatStorageProvider, KeyValueStore
from utils.qr_storage import StorageProvider
from utils.sql_storage import SQLStorageProvider

logger = logging.getLogger(__name__)


class StorageFactory:
    def __init__(
        self,
        environment: Optional[Environment] = None,
        database_url: Optional[str] = None,
        flat_store: Optional[KeyValueStore] = None,
        structured_factory: Optional[Callable[[], StorageProvider]] = None,
    ) -> None:
        self.environment = environment or Environment()
        self.database_url = database_url
        self.flat_store = flat_store
        self.structured_factory = structured_factory or (lambda: SQLStorageProvider(self.database_url))
        self._provider: Optional[StorageProvider] = None
        # Lock entsteht erst im laufenden Event-Loop (Factory wird beim Import gebaut)
        self._lock: Optional[asyncio.Lock] = None

    @property
    def provider(self) -> Optional[StorageProvider]:
        return self._provider

    async def _select(self) -> StorageProvider:
        if self.environment.structured_store:
            try:
                provider = self.structured_factory()
                await provider.get_stats()
                logger.info("✅ Strukturierter Speicher aktiv")
                return provider
            except Exception as e:
                logger.warning(f"⚠️ Strukturierter Speicher nicht verfügbar, nutze Fallback: {e}")

        logger.info("📄 Flacher Speicher aktiv")
        return FlatStorageProvider(self.flat_store)

    async def get_provider(self) -> StorageProvider:
        if self._provider is None:
            if self._lock is None:
                self._lock = asyncio.Lock()
            async with self._lock:
                if self._provider is None:
                    self._provider = await self._select()
        return self._provider


# ---------------------------------------------------------------------------
# 🌍 Prozessweite Instanz (nur für die äußerste Schicht)
# ---------------------------------------------------------------------------
_factory: Optional[StorageFactory] = None


def get_storage_factory() -> StorageFactory:
    global _factory
    if _factory is None:
        _factory = StorageFactory(detect_environment())
    return _factory
