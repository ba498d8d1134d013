"""Scan scheduling and orchestration."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import requests

from arb_engine.calculations import (
    DEFAULT_MIN_ROI_PCT,
    DEFAULT_TOTAL_STAKE,
    DetectionConfig,
    Surebet,
    find_surebets,
)
from normalize.markets import MarketOdds, merge_markets
from normalize.names import NameNormalizer
from normalize.providers import ADAPTERS
from odds_client.catalog import PROVIDERS, ProviderInfo
from odds_client.client import ProviderClient, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30


@dataclass
class ScanConfig:
    total_stake: Decimal = DEFAULT_TOTAL_STAKE
    min_roi_pct: Decimal = DEFAULT_MIN_ROI_PCT
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    providers: List[str] = field(default_factory=lambda: [p.key for p in PROVIDERS])
    max_workers: Optional[int] = None

    def detection(self) -> DetectionConfig:
        return DetectionConfig.from_values(self.total_stake, self.min_roi_pct)


@dataclass
class ScanResult:
    """Outcome of one fetch + normalize + detect cycle."""

    surebets: List[Surebet]
    markets_considered: int
    providers_failed: List[str]
    completed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": len(self.surebets),
            "surebets": [surebet.to_dict() for surebet in self.surebets],
        }


class ScanController:
    def __init__(
        self,
        client: ProviderClient,
        providers: Sequence[ProviderInfo] = PROVIDERS,
        name_normalizer: Optional[NameNormalizer] = None,
    ) -> None:
        self._client = client
        self._providers = {provider.key: provider for provider in providers}
        self._name_normalizer = name_normalizer or NameNormalizer()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._config: Optional[ScanConfig] = None
        self._latest: Optional[ScanResult] = None

    @property
    def latest(self) -> Optional[ScanResult]:
        return self._latest

    def run_snapshot(self, config: ScanConfig) -> ScanResult:
        payloads = self.fetch_all(config)
        markets = merge_markets(self.normalize(payloads), self._name_normalizer)
        surebets = find_surebets(markets, config.detection())
        result = ScanResult(
            surebets=surebets,
            markets_considered=len(markets),
            providers_failed=[key for key, payload in payloads.items() if payload is None],
            completed_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Scan pass completed: %d markets, %d surebets, failed providers %s",
            result.markets_considered,
            len(surebets),
            result.providers_failed,
        )
        self._latest = result
        return result

    def start(self, config: ScanConfig) -> None:
        if self._thread and self._thread.is_alive():
            raise RuntimeError("Scan already running")
        self._config = config
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="surebet-scanner", daemon=True)
        self._thread.start()
        logger.info("Continuous scanning started (every %ss)", config.interval_seconds)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._thread = None
        logger.info("Scanning stopped")

    def fetch_all(self, config: ScanConfig) -> Dict[str, Any]:
        """Fetch every configured provider concurrently.

        Each provider resolves to its payload or ``None``; one provider failing
        or lagging never affects the others' results.
        """

        providers = []
        for key in config.providers:
            provider = self._providers.get(key)
            if provider is None:
                logger.warning("Unknown provider requested: %s", key)
                continue
            providers.append(provider)
        if not providers:
            return {}

        workers = config.max_workers or len(providers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="provider-fetch") as pool:
            futures = {provider.key: pool.submit(self._fetch_one, provider) for provider in providers}
            return {key: future.result() for key, future in futures.items()}

    def normalize(self, payloads: Dict[str, Any]) -> List[MarketOdds]:
        markets: List[MarketOdds] = []
        for key, payload in payloads.items():
            adapter = ADAPTERS.get(key)
            if adapter is None:
                logger.warning("No adapter registered for provider %s", key)
                continue
            normalized = adapter(payload)
            logger.debug("Provider %s normalized into %d markets", key, len(normalized))
            markets.extend(normalized)
        return markets

    def _fetch_one(self, provider: ProviderInfo) -> Optional[Any]:
        try:
            return self._client.fetch(provider)
        except (ProviderError, requests.RequestException) as exc:
            logger.error("Odds fetch failed for %s: %s", provider.key, exc)
        except Exception:
            logger.exception("Unexpected error fetching %s", provider.key)
        return None

    def _run_loop(self) -> None:
        assert self._config is not None
        config = self._config
        while not self._stop_event.is_set():
            start_time = time.time()
            try:
                self.run_snapshot(config)
            except Exception as exc:  # pragma: no cover - best effort logging
                logger.exception("Scan pass failed: %s", exc)
            elapsed = time.time() - start_time
            sleep_for = max(config.interval_seconds - elapsed, 0)
            if sleep_for:
                self._stop_event.wait(timeout=sleep_for)

