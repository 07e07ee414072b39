from __future__ import annotations

from dataclasses import dataclass

from utils import qr_config


@dataclass(frozen=True)
class Environment:
    """
    Fähigkeiten der Laufzeitumgebung.

    Wird einmal beim Start ermittelt und an Engine und StorageFactory
    übergeben, statt dass diese selbst globale Zustände abfragen.
    """

    structured_store: bool = True
    network: bool = True
    local_renderer: bool = True
    remote_probe: bool = False
    remote_probe_timeout: float = 3.0


def detect_environment() -> Environment:
    return Environment(
        structured_store=qr_config.ENABLE_SQL_STORE,
        network=qr_config.ENABLE_NETWORK,
        local_renderer=qr_config.ENABLE_LOCAL_RENDERER,
        remote_probe=qr_config.REMOTE_PROBE,
        remote_probe_timeout=qr_config.REMOTE_PROBE_TIMEOUT,
    )
