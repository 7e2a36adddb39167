# wpaudit/relay.py
"""
Relay transport.

Every request to a target site goes through a third-party relay ("CORS proxy")
which fetches the URL on our behalf. Relays are free services and flaky, so the
transport:
 - keeps per-relay health (consecutive failures, last success) and skips relays
   that keep failing, retrying them after a grace period;
 - fails over from one relay to the next within a single fetch;
 - caches successful responses for a short TTL so the engine can fetch the same
   page from several scans without hitting the relays again.

All state is owned by a RelayTransport instance and only touched from the event
loop thread.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from . import config
from .errors import RelayExhausted

logger = logging.getLogger(__name__)


@dataclass
class RelayHealth:
    consecutive_failures: int = 0
    last_success: float = 0.0


@dataclass
class RelayEndpoint:
    name: str
    template: str
    health: RelayHealth = field(default_factory=RelayHealth)

    def build_url(self, target: str) -> str:
        return self.template.replace("{url}", quote(target, safe=""))


@dataclass
class RelayResponse:
    url: str
    status: int
    headers: httpx.Headers
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def copy(self) -> "RelayResponse":
        return RelayResponse(url=self.url, status=self.status, headers=httpx.Headers(self.headers), body=self.body)


@dataclass
class CachedResponse:
    response: RelayResponse
    created: float


class ProbeOutcome(NamedTuple):
    exists: bool
    status_code: int


def is_acceptable(response: RelayResponse) -> bool:
    """2xx/3xx, or 401/403 (resource exists but is denied), with a real body."""
    status_ok = 200 <= response.status < 400 or response.status in (401, 403)
    return status_ok and len(response.body) >= config.MIN_BODY_LENGTH


async def failover(
    url: str,
    endpoints: Sequence[RelayEndpoint],
    send: Callable[[RelayEndpoint], Awaitable[RelayResponse]],
    accept: Callable[[RelayResponse], bool] = is_acceptable,
    timeout: float = config.RELAY_TIMEOUT,
    on_failure: Optional[Callable[[RelayEndpoint, str], None]] = None,
) -> Tuple[RelayEndpoint, RelayResponse]:
    """
    Try each endpoint once, in order, until one returns an acceptable response.
    Each attempt is cancelled after `timeout` seconds.
    Raises RelayExhausted with every per-relay reason when none succeeds.
    """
    errors: List[str] = []
    statuses: List[int] = []

    for endpoint in endpoints:
        try:
            response = await asyncio.wait_for(send(endpoint), timeout)
        except asyncio.TimeoutError:
            reason = f"timed out after {timeout:g}s"
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            reason = str(e) or e.__class__.__name__
        else:
            if accept(response):
                return endpoint, response
            statuses.append(response.status)
            if len(response.body) < config.MIN_BODY_LENGTH:
                reason = f"HTTP {response.status}, empty response"
            else:
                reason = f"HTTP {response.status}"

        errors.append(f"{endpoint.name}: {reason}")
        if on_failure:
            on_failure(endpoint, reason)

    raise RelayExhausted(url, errors, statuses)


class RelayTransport:
    def __init__(
        self,
        relays: Optional[Iterable[Tuple[str, str]]] = None,
        timeout: float = config.RELAY_TIMEOUT,
        cache_ttl: float = config.CACHE_TTL,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.client = client
        # a client we create ourselves is ours to close
        self._owns_client = client is None
        self.clock = clock
        self.endpoints: List[RelayEndpoint] = [
            RelayEndpoint(name, template) for name, template in (relays or config.relays_from_env())
        ]
        # the grace period of a relay that never worked runs from transport creation
        started = self.clock()
        for endpoint in self.endpoints:
            endpoint.health.last_success = started
        self._preferred = 0
        self._cache: Dict[str, CachedResponse] = {}

    # ---------- health ----------

    def healthy_endpoints(self) -> List[RelayEndpoint]:
        now = self.clock()
        healthy = [
            ep for ep in self.endpoints
            if ep.health.consecutive_failures < config.FAILURE_THRESHOLD
            or now - ep.health.last_success > config.HEALTH_GRACE_SECONDS
        ]
        candidates = healthy or list(self.endpoints)
        # rotate so the last relay that worked is tried first
        total = len(self.endpoints)
        position = {id(ep): i for i, ep in enumerate(self.endpoints)}
        return sorted(candidates, key=lambda ep: (position[id(ep)] - self._preferred) % total)

    def _mark_failure(self, endpoint: RelayEndpoint, reason: str) -> None:
        endpoint.health.consecutive_failures += 1
        logger.debug("Relay %s failed (%d in a row): %s", endpoint.name, endpoint.health.consecutive_failures, reason)

    def _mark_success(self, endpoint: RelayEndpoint) -> None:
        endpoint.health.consecutive_failures = 0
        endpoint.health.last_success = self.clock()
        self._preferred = next(i for i, ep in enumerate(self.endpoints) if ep is endpoint)

    def health_snapshot(self) -> List[Dict]:
        now = self.clock()
        healthy = {id(ep) for ep in self.healthy_endpoints()}
        return [
            {
                "name": ep.name,
                "consecutive_failures": ep.health.consecutive_failures,
                "seconds_since_success": round(now - ep.health.last_success, 1),
                "healthy": id(ep) in healthy,
                "preferred": i == self._preferred,
            }
            for i, ep in enumerate(self.endpoints)
        ]

    def reset_health(self) -> None:
        now = self.clock()
        for endpoint in self.endpoints:
            endpoint.health = RelayHealth(last_success=now)
        self._preferred = 0

    # ---------- cache ----------

    def _cached(self, url: str) -> Optional[RelayResponse]:
        entry = self._cache.get(url)
        if entry is None:
            return None
        if self.clock() - entry.created >= self.cache_ttl:
            del self._cache[url]
            return None
        return entry.response.copy()

    def _prune(self) -> None:
        now = self.clock()
        expired = [url for url, entry in self._cache.items() if now - entry.created >= self.cache_ttl]
        for url in expired:
            del self._cache[url]

    def _store(self, url: str, response: RelayResponse) -> None:
        self._prune()
        self._cache[url] = CachedResponse(response.copy(), self.clock())

    def clear_cache(self) -> None:
        self._cache.clear()

    # ---------- fetching ----------

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout)
        return self.client

    async def aclose(self) -> None:
        """Close the client if the transport created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()
            self.client = None

    async def _send(self, client: httpx.AsyncClient, endpoint: RelayEndpoint, url: str) -> RelayResponse:
        resp = await client.get(endpoint.build_url(url), headers=config.REQUEST_HEADERS, follow_redirects=True)
        return RelayResponse(url=url, status=resp.status_code, headers=resp.headers, body=resp.text)

    async def fetch(
        self,
        url: str,
        use_cache: bool = True,
        accept: Callable[[RelayResponse], bool] = is_acceptable,
    ) -> RelayResponse:
        if use_cache:
            cached = self._cached(url)
            if cached is not None:
                return cached

        client = self._get_client()
        try:
            endpoint, response = await failover(
                url,
                self.healthy_endpoints(),
                lambda ep: self._send(client, ep, url),
                accept=accept,
                timeout=self.timeout,
                on_failure=self._mark_failure,
            )
        except RelayExhausted as exc:
            logger.debug("%s", exc)
            raise

        self._mark_success(endpoint)
        if use_cache and 200 <= response.status < 400:
            self._store(url, response)
        return response

    async def probe_exists(self, url: str) -> ProbeOutcome:
        try:
            response = await self.fetch(url)
        except RelayExhausted:
            return ProbeOutcome(False, 0)
        exists = response.ok or response.status in (401, 403)
        return ProbeOutcome(exists, response.status)

    async def probe_many_exist(self, urls: Sequence[str], concurrency: int = config.PROBE_CONCURRENCY) -> Dict[str, ProbeOutcome]:
        """Probe in fixed-size batches; a batch finishes before the next one starts."""
        results: Dict[str, ProbeOutcome] = {}
        size = max(1, concurrency)
        for i in range(0, len(urls), size):
            batch = list(urls[i:i + size])
            outcomes = await asyncio.gather(*(self.probe_exists(u) for u in batch))
            results.update(zip(batch, outcomes))
        return results


_default_transport: Optional[RelayTransport] = None


def get_default_transport() -> RelayTransport:
    """Process-wide transport shared by audits that don't bring their own."""
    global _default_transport
    if _default_transport is None:
        _default_transport = RelayTransport()
    return _default_transport
