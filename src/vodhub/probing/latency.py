"""
vodhub.probing.latency - Real-time latency measurement for video sources.

LatencyProbe keeps the most recent LatencySample per source id and, while
the ``realtime_latency`` preference is on, re-measures every source on a
fixed interval. Failures never raise: a failed probe leaves the previous
sample in place so one transient error does not reshuffle the ranking.

Scheduling rules:

- start() fires one cycle immediately, then one per interval.
- A source with a probe still outstanding is skipped by later cycles.
- stop() (or losing the last observer) cancels the timer and bumps the
  generation; cycles already in flight are left to finish, but their
  results are dropped.

Example:
    >>> probe = LatencyProbe(store, ping_url="http://localhost:3000/api/ping")
    >>> probe.set_sources(videos)
    >>> unsubscribe = probe.subscribe(lambda latencies: print(latencies))
    >>> probe.start()
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace

import httpx

from vodhub.config.settings import Settings, SettingsStore
from vodhub.models.source import LatencySample, VideoSource

logger = logging.getLogger(__name__)

LatencyObserver = Callable[[dict[str, float]], None]


class LatencyProbe:
    """Measures and retains per-source round-trip latency.

    Args:
        settings: Settings store; ``realtime_latency``, ``probe_interval_ms``
            and ``probe_timeout`` are re-read on every cycle.
        ping_url: Backend ping endpoint (``POST {"url": ...}`` ->
            ``{"latency": ms}``). When None, the source base URL is timed
            directly with a GET.
        client: Optional shared httpx.AsyncClient.
    """

    def __init__(
        self,
        settings: SettingsStore,
        *,
        ping_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._ping_url = ping_url
        self._client = client

        self._sources: dict[str, str] = {}
        self._samples: dict[str, LatencySample] = {}
        self._in_flight: set[str] = set()
        self._generation = 0

        self._timer: asyncio.Task | None = None
        self._cycles: set[asyncio.Task] = set()
        self._observers: list[LatencyObserver] = []
        self._unsubscribe_settings = settings.subscribe(self._on_settings_changed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def latencies(self) -> dict[str, float]:
        """Latest latency per source id (only sources measured at least once)."""
        return {sid: s.latency_ms for sid, s in self._samples.items()}

    @property
    def samples(self) -> dict[str, LatencySample]:
        return dict(self._samples)

    @property
    def sources(self) -> dict[str, str]:
        return dict(self._sources)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_loading(self) -> bool:
        return bool(self._in_flight)

    def set_sources(self, sources: Iterable[VideoSource] | Mapping[str, str]) -> None:
        """Replace the probed source set.

        Accepts VideoSources (deduplicated by source id) or an id -> base URL
        mapping. Samples for sources no longer present are discarded, and
        results of cycles started against the old set are dropped.
        """
        if isinstance(sources, Mapping):
            new = {sid: url for sid, url in sources.items() if url}
        else:
            new = {}
            for video in sources:
                if video.base_url and video.source_id not in new:
                    new[video.source_id] = video.base_url

        self._generation += 1
        self._sources = new
        self._samples = {sid: s for sid, s in self._samples.items() if sid in new}
        logger.debug(f"Probing {len(new)} source(s), generation {self._generation}")

        if not new and self.is_running:
            self.stop()

    def annotate(self, videos: Iterable[VideoSource]) -> list[VideoSource]:
        """Copies of ``videos`` carrying the latest known latency of their source."""
        result = []
        for video in videos:
            sample = self._samples.get(video.source_id)
            result.append(replace(video, latency_ms=sample.latency_ms) if sample else video)
        return result

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    async def probe_one(self, source_id: str, base_url: str) -> float | None:
        """Measure one round trip to ``base_url``. Returns None on any failure."""
        timeout = self._settings.snapshot().probe_timeout
        try:
            if self._client is not None:
                return await self._measure(self._client, base_url, timeout)
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await self._measure(client, base_url, timeout)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError) as e:
            logger.debug(f"Latency probe for {source_id} failed: {e}")
            return None

    async def _measure(
        self, client: httpx.AsyncClient, base_url: str, timeout: float
    ) -> float | None:
        if self._ping_url:
            response = await client.post(
                self._ping_url, json={"url": base_url}, timeout=timeout
            )
            if not response.is_success:
                return None
            body = response.json()
            latency = body.get("latency") if isinstance(body, dict) else None
            # Zero or missing latency means the backend could not measure
            if isinstance(latency, bool) or not isinstance(latency, (int, float)):
                return None
            if not math.isfinite(latency) or latency <= 0:
                return None
            return float(latency)

        started = time.perf_counter()
        response = await client.get(base_url, timeout=timeout)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if not response.is_success:
            return None
        return round(elapsed_ms, 1)

    async def _probe_guarded(self, source_id: str, base_url: str) -> float | None:
        if source_id in self._in_flight:
            logger.debug(f"Probe for {source_id} still outstanding, skipping")
            return None
        self._in_flight.add(source_id)
        try:
            return await self.probe_one(source_id, base_url)
        finally:
            self._in_flight.discard(source_id)

    async def probe_all(
        self, sources: Mapping[str, str] | None = None
    ) -> dict[str, float | None]:
        """Probe every source concurrently and merge the successful results.

        Args:
            sources: id -> base URL map; defaults to the current source set.

        Returns:
            Raw result per source id (None for failures and skipped sources).
        """
        targets = dict(sources if sources is not None else self._sources)
        if not targets:
            return {}

        generation = self._generation
        ids = list(targets)
        results = await asyncio.gather(
            *(self._probe_guarded(sid, targets[sid]) for sid in ids)
        )
        mapping = dict(zip(ids, results))

        if generation != self._generation:
            logger.debug(f"Dropping stale probe results from generation {generation}")
            return mapping

        self._merge(mapping)
        return mapping

    async def refresh_one(self, source_id: str) -> float | None:
        """Re-measure a single known source outside the timer."""
        base_url = self._sources.get(source_id)
        if base_url is None:
            return None

        generation = self._generation
        latency = await self._probe_guarded(source_id, base_url)
        if generation == self._generation:
            self._merge({source_id: latency})
        return latency

    async def refresh_all(self) -> dict[str, float | None]:
        return await self.probe_all()

    def _merge(self, results: Mapping[str, float | None]) -> None:
        changed = False
        now = time.time()
        for source_id, latency in results.items():
            if latency is None:
                continue
            self._samples[source_id] = LatencySample(source_id, latency, now)
            changed = True

        if changed:
            latencies = self.latencies
            for observer in list(self._observers):
                observer(latencies)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _should_poll(self, settings: Settings) -> bool:
        return settings.realtime_latency and bool(self._sources)

    def start(self) -> bool:
        """Start periodic probing if enabled. Must be called inside a running loop.

        Returns:
            True if the timer is running after the call.
        """
        if self.is_running:
            return True
        if not self._should_poll(self._settings.snapshot()):
            return False

        self._timer = asyncio.get_running_loop().create_task(
            self._run(), name="latency-probe-timer"
        )
        return True

    async def _run(self) -> None:
        while True:
            settings = self._settings.snapshot()
            if not self._should_poll(settings):
                logger.debug("Real-time latency disabled, stopping probe timer")
                self._timer = None
                return

            # Detached; the timer keeps its cadence while a cycle is outstanding
            cycle = asyncio.create_task(self.probe_all(), name="latency-probe-cycle")
            self._cycles.add(cycle)
            cycle.add_done_callback(self._cycles.discard)

            await asyncio.sleep(settings.probe_interval_ms / 1000)

    def stop(self) -> None:
        """Cancel the timer; results of in-flight cycles will be dropped."""
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def close(self) -> None:
        """Stop probing, wait for in-flight cycles and detach from settings."""
        self.stop()
        self._unsubscribe_settings()
        self._observers.clear()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    def subscribe(self, observer: LatencyObserver) -> Callable[[], None]:
        """Register an observer of the latency map.

        Returns:
            Unsubscribe function. Removing the last observer stops probing.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)
                if not self._observers:
                    self.stop()

        return unsubscribe

    def _on_settings_changed(self, settings: Settings) -> None:
        if not settings.realtime_latency:
            if self.is_running:
                self.stop()
            return
        if not self._observers:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self.start()
