# wpaudit/conftest.py
# Fake relays and target sites for the tests. Nothing here touches the network.
import httpx
import pytest

from wpaudit.relay import RelayTransport

RELAY_A = ("RelayA", "https://relay-a.test/raw?url={url}")
RELAY_B = ("RelayB", "https://relay-b.test/?u={url}")

ALL_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=()",
    "X-XSS-Protection": "0",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Embedder-Policy": "require-corp",
}


def page(html: str) -> str:
    """Pad a body past the relay's minimum length."""
    return html + "<!--" + "." * 120 + "-->"


WP_HOME = page(
    '<html><head><link rel="stylesheet" href="https://site.test/wp-content/themes/astra/style.css?ver=4.1.0">'
    '<script src="https://site.test/wp-includes/js/jquery/jquery.min.js?ver=6.4.2"></script>'
    "</head><body>Just another blog</body></html>"
)


class Clock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeSite:
    """
    Routes keyed by target URL. Each relay resolves the target from its own
    query parameter; a relay listed in `down` answers 502 for everything.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.down = set()

    def add(self, url, body="", status=200, headers=None):
        self.routes[url] = (status, body, headers or {})

    def target_of(self, request: httpx.Request) -> str:
        params = request.url.params
        return params.get("url") or params.get("u")

    def handler(self, request: httpx.Request) -> httpx.Response:
        target = self.target_of(request)
        relay = request.url.host
        self.requests.append((relay, target))
        if relay in self.down:
            return httpx.Response(502, text="bad gateway")
        if target not in self.routes:
            return httpx.Response(404, text=page("<h1>Not Found</h1>"))
        status, body, headers = self.routes[target]
        return httpx.Response(status, text=body, headers=headers)

    def targets(self):
        return [t for _, t in self.requests]


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def make_transport(site, clock):
    def _make(relays=(RELAY_A,), handler=None, **kwargs):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler or site.handler))
        return RelayTransport(relays=list(relays), client=client, clock=clock, **kwargs)
    return _make


@pytest.fixture
def transport(make_transport):
    return make_transport()
