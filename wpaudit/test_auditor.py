# wpaudit/test_auditor.py
import asyncio

import pytest

from wpaudit.auditor import audit_site, normalize_url
from wpaudit.conftest import ALL_HEADERS, WP_HOME, page
from wpaudit.errors import ConnectionFailed

URL = "https://site.test"


def test_normalize_url():
    assert normalize_url("site.test/") == URL
    assert normalize_url("  http://site.test  ") == "http://site.test"
    assert normalize_url("HTTPS://site.test/blog/") == "HTTPS://site.test/blog"


def test_clean_site(site, transport):
    site.add(URL, WP_HOME, headers=ALL_HEADERS)

    result = asyncio.run(audit_site("site.test", transport=transport))

    assert result.url == URL
    assert result.is_wordpress
    assert result.overall_score == 95
    assert result.severity.score == 0.0
    assert result.severity.severity == "None"
    assert all(e.status == "blocked" for e in result.endpoints)
    assert result.user_enumeration.status == "not-found"
    assert result.metadata.version == "6.4.2"
    assert [r.title for r in result.recommendations] == ["Good job"]


def test_exposed_git_and_xmlrpc(site, transport):
    site.add(URL, WP_HOME, headers=ALL_HEADERS)
    site.add(URL + "/.git/", page("Index of /.git"))
    site.add(URL + "/xmlrpc.php", page("XML-RPC server accepts POST requests only."))

    result = asyncio.run(audit_site(URL, transport=transport))

    assert result.overall_score == 76
    assert result.severity.score == 7.5
    assert result.severity.severity == "High"
    titles = [r.title for r in result.recommendations]
    assert "Disable XML-RPC" in titles
    assert "Hide the .git directory" in titles


def test_users_exposed_through_rest_route(site, transport):
    site.add(URL, WP_HOME, headers=ALL_HEADERS)
    site.add(URL + "/?rest_route=/wp/v2/users", '[{"id":1,"name":"admin","slug":"admin"}]')

    result = asyncio.run(audit_site(URL, transport=transport))

    enumeration = result.user_enumeration
    assert enumeration.found
    assert [(u.id, u.name, u.slug) for u in enumeration.users] == [(1, "admin", "admin")]
    assert "rest_route" in enumeration.method
    # exposed users cost 12
    assert result.overall_score == 88
    assert result.severity.score == 5.3


def test_all_relays_down(site, make_transport):
    site.add(URL, WP_HOME)
    site.down.add("relay-a.test")
    transport = make_transport()

    with pytest.raises(ConnectionFailed) as exc:
        asyncio.run(audit_site(URL, transport=transport))

    assert "relay" in str(exc.value).lower()
    assert "RelayA" in str(exc.value)


def test_progress_is_reported_in_order(site, transport):
    site.add(URL, WP_HOME, headers=ALL_HEADERS)
    seen = []

    asyncio.run(audit_site(URL, seen.append, transport=transport))

    assert [p.current for p in seen] == [0, 1, 2, 3, 4]
    assert [p.percentage for p in seen] == [0, 25, 50, 75, 100]
    assert all(p.total == 4 for p in seen)
    assert seen[-1].step == "Done"


def test_async_progress_callback(site, transport):
    site.add(URL, WP_HOME, headers=ALL_HEADERS)
    seen = []

    async def on_progress(progress):
        await asyncio.sleep(0)
        seen.append(progress.current)

    asyncio.run(audit_site(URL, on_progress, transport=transport))
    assert seen == [0, 1, 2, 3, 4]


def test_connection_failure_stops_progress(site, make_transport):
    site.down.add("relay-a.test")
    seen = []

    with pytest.raises(ConnectionFailed):
        asyncio.run(audit_site(URL, seen.append, transport=make_transport()))

    assert [p.current for p in seen] == [0]


def test_audit_runs_on_subdirectory(site, transport):
    site.add(URL, page("<html>Company homepage</html>"), headers=ALL_HEADERS)
    site.add(URL + "/blog", WP_HOME, headers=ALL_HEADERS)
    site.add(URL + "/blog/.env", page("DB_PASSWORD=hunter2"))

    result = asyncio.run(audit_site(URL, transport=transport))

    assert result.wordpress.subdirectory == "/blog"
    env = next(e for e in result.endpoints if e.path == "/.env")
    assert env.url == URL + "/blog/.env"
    assert env.status == "accessible"
