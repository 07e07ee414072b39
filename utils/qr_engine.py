"""
utils/qr_engine.py
────────────────────────────────────────────
Zentrale QR-Engine für QR Studio.
- Hält die registrierten Strategien sortiert nach Priorität
- Merkt sich die zuletzt erfolgreiche Strategie (Fast Path)
- Fällt bei Fehlern automatisch auf die nächste Strategie zurück
- Wirft nie: Ergebnis ist immer ein GenerationResult
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from utils.environment import Environment, detect_environment
from utils.qr_schema import GenerationRequest, GenerationResult
from utils.qr_strategies import GenerationStrategy, default_strategies, failure_result

logger = logging.getLogger(__name__)

CONTENT_REQUIRED = "Content is required"
ALL_STRATEGIES_FAILED = "All generation strategies failed"


class GenerationEngine:
    def __init__(self, strategies: Iterable[GenerationStrategy] = ()) -> None:
        self._strategies: List[GenerationStrategy] = []
        self.last_successful_strategy: Optional[str] = None
        for strategy in strategies:
            self.register_strategy(strategy)

    @property
    def strategies(self) -> Tuple[GenerationStrategy, ...]:
        return tuple(self._strategies)

    def register_strategy(self, strategy: GenerationStrategy) -> None:
        """Fügt eine Strategie hinzu und sortiert stabil nach Priorität."""
        if any(s.name == strategy.name for s in self._strategies):
            raise ValueError(f"Strategy '{strategy.name}' is already registered")
        self._strategies.append(strategy)
        self._strategies.sort(key=lambda s: s.priority)

    def get_strategy(self, name: str) -> Optional[GenerationStrategy]:
        return next((s for s in self._strategies if s.name == name), None)

    async def _attempt(self, strategy: GenerationStrategy, request: GenerationRequest) -> Optional[GenerationResult]:
        """Gibt das Ergebnis bei Erfolg zurück, sonst None."""
        try:
            if not await strategy.is_available():
                logger.debug(f"⏭️ Strategie nicht verfügbar: {strategy.name}")
                return None
            result = await strategy.generate(request)
        except Exception as e:
            logger.warning(f"⚠️ Strategie {strategy.name} fehlgeschlagen: {e}")
            return None

        if not result.success:
            logger.info(f"↪️ Strategie {strategy.name} lieferte Fehler: {result.error}")
            return None
        return result

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        if not request.content or not request.content.strip():
            return failure_result(CONTENT_REQUIRED)

        # 1️⃣ Fast Path: zuletzt erfolgreiche Strategie zuerst
        if self.last_successful_strategy:
            last = self.get_strategy(self.last_successful_strategy)
            if last is not None:
                result = await self._attempt(last, request)
                if result is not None:
                    return result

        # 2️⃣ Alle Strategien nach Priorität
        for strategy in self._strategies:
            result = await self._attempt(strategy, request)
            if result is not None:
                self.last_successful_strategy = strategy.name
                logger.info(f"✅ QR-Code erstellt mit Strategie: {strategy.name}")
                return result

        logger.error(f"❌ Keine Strategie erfolgreich ({len(self._strategies)} registriert)")
        return failure_result(ALL_STRATEGIES_FAILED)

    async def get_available_strategies(self) -> List[str]:
        available: List[str] = []
        for strategy in self._strategies:
            try:
                if await strategy.is_available():
                    available.append(strategy.name)
            except Exception as e:
                logger.warning(f"⚠️ Verfügbarkeitsprüfung {strategy.name} fehlgeschlagen: {e}")
        return available


def create_default_engine(environment: Optional[Environment] = None) -> GenerationEngine:
    return GenerationEngine(default_strategies(environment).values())


# ---------------------------------------------------------------------------
# 🌍 Prozessweite Instanz (nur für die äußerste Schicht, z. B. Skripte)
# ---------------------------------------------------------------------------
_engine: Optional[GenerationEngine] = None


def get_generation_engine() -> GenerationEngine:
    global _engine
    if _engine is None:
        _engine = create_default_engine(detect_environment())
    return _engine
