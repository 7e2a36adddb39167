# wpaudit/scans/user_enumeration.py
import json
import logging
import re
from typing import List, Optional, Set
from urllib.parse import unquote

from .. import config
from ..errors import RelayExhausted
from ..models import UserEnumeration, WordPressUser
from ..probes import BLOCK_STATUSES, USER_ENUM_SUBDIRECTORIES
from ..references import get_reference
from ..relay import RelayResponse, RelayTransport, is_acceptable

logger = logging.getLogger(__name__)

AUTHOR_PATTERN = re.compile(r"/author/([^/\"'?#\s<>]+)", re.I)

# (label, url builder) in priority order; ?rest_route= still works when
# pretty permalinks or the /wp-json/ path are blocked
JSON_METHODS = [
    ("REST Route", lambda base: base + "/?rest_route=/wp/v2/users"),
    ("REST API", lambda base: base + "/wp-json/wp/v2/users"),
]


def parse_users(body: str) -> List[WordPressUser]:
    try:
        data = json.loads(body)
    except ValueError:
        return []
    if not isinstance(data, list):
        return []

    users: List[WordPressUser] = []
    for item in data:
        if not isinstance(item, dict) or item.get("id") is None:
            continue
        try:
            slug = str(item.get("slug") or "")
            users.append(WordPressUser(id=int(item["id"]), name=str(item.get("name") or slug), slug=slug))
        except (TypeError, ValueError):
            continue
        if len(users) >= config.MAX_USERS:
            break
    return users


def accepts_user_list(resp: RelayResponse) -> bool:
    """Relay acceptance, plus short 2xx bodies that parse as a JSON list."""
    if is_acceptable(resp):
        return True
    if not resp.ok:
        return False
    try:
        return isinstance(json.loads(resp.body), list)
    except ValueError:
        return False


def candidate_bases(target: str, root: str) -> List[str]:
    bases = [target]
    for sub in USER_ENUM_SUBDIRECTORIES:
        url = root + sub
        if url not in bases:
            bases.append(url)
    return bases


async def _fetch(url: str, transport: RelayTransport, blocked: Set[int],
                 accept=is_acceptable) -> Optional[RelayResponse]:
    try:
        resp = await transport.fetch(url, accept=accept)
    except RelayExhausted as e:
        blocked.update(e.statuses & BLOCK_STATUSES)
        return None
    if resp.status in BLOCK_STATUSES:
        blocked.add(resp.status)
        return None
    return resp


def _found(users: List[WordPressUser], method: str) -> UserEnumeration:
    return UserEnumeration(
        status="found",
        users=users[:config.MAX_USERS],
        method=method,
        description=(
            f"{len(users)} user(s) exposed via {method}. Restrict the /wp/v2/users route to "
            "authenticated requests and disable author archives or redirect ?author= queries."
        ),
        reference=get_reference("user-enumeration"),
    )


async def run(target: str, transport: RelayTransport, root: Optional[str] = None) -> UserEnumeration:
    root = (root or target).rstrip("/")
    target = target.rstrip("/")
    blocked: Set[int] = set()

    for label, build in JSON_METHODS:
        for base in candidate_bases(target, root):
            url = build(base)
            resp = await _fetch(url, transport, blocked, accept=accepts_user_list)
            if resp is None or not resp.ok:
                continue
            users = parse_users(resp.body)
            if users:
                return _found(users, f"{label} ({url[len(root):]})")

    authors: List[WordPressUser] = []
    for n in range(1, config.AUTHOR_PROBES + 1):
        resp = await _fetch(f"{target}/?author={n}", transport, blocked)
        if resp is None:
            continue
        m = AUTHOR_PATTERN.search(resp.body)
        if m:
            slug = unquote(m.group(1))
            if all(u.slug != slug for u in authors):
                authors.append(WordPressUser(id=n, name=slug, slug=slug))
    if authors:
        return _found(authors, "Author Parameter (?author=N)")

    if blocked:
        codes = ", ".join(str(s) for s in sorted(blocked))
        logger.debug("User enumeration blocked on %s (HTTP %s)", target, codes)
        return UserEnumeration(
            status="protected",
            description=(
                f"User endpoints answered HTTP {codes}: enumeration is blocked by the site "
                "or a firewall. Keep this protection in place."
            ),
        )
    return UserEnumeration(
        status="not-found",
        description=(
            "No users could be listed through the REST API or author archives. "
            "Verify the users route stays disabled for anonymous visitors after updates."
        ),
    )
