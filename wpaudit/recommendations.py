# wpaudit/recommendations.py
from typing import List, Sequence

from .models import EndpointFinding, HeaderFinding, Recommendation, SiteMetadata, UserEnumeration

ENDPOINT_ADVICE = {
    "/xmlrpc.php": (
        "Disable XML-RPC",
        "XML-RPC is enabled and can be used for brute-force and amplification attacks. "
        "Block it in the web server, e.g. <Files xmlrpc.php> Require all denied </Files>.",
    ),
    "/wp-content/debug.log": (
        "Remove debug.log",
        "The debug log is publicly readable. Delete it, set WP_DEBUG_LOG to a path outside the web root "
        "and disable WP_DEBUG in production.",
    ),
    "/.git/": (
        "Hide the .git directory",
        "The Git repository is exposed and can reveal source code and credentials. Deny access to "
        "dot-directories in the web server configuration.",
    ),
    "/wp-admin/install.php": (
        "Block the installer",
        "install.php is reachable. Deny access to it once WordPress is installed.",
    ),
}

SECRET_FILES = {"/wp-config.php.bak", "/wp-config.php~", "/.env", "/backup.sql", "/database.sql"}


def build(
    headers: Sequence[HeaderFinding],
    endpoints: Sequence[EndpointFinding],
    user_enumeration: UserEnumeration,
    metadata: SiteMetadata,
) -> List[Recommendation]:
    recs: List[Recommendation] = []
    accessible = {e.path: e for e in endpoints if e.status == "accessible"}

    for path, (title, description) in ENDPOINT_ADVICE.items():
        if path in accessible:
            recs.append(Recommendation(level="critical", title=title, description=description))

    exposed_secrets = [p for p in accessible if p in SECRET_FILES]
    if exposed_secrets:
        recs.append(Recommendation(
            level="critical",
            title="Remove backup and environment files",
            description=f"These files are downloadable: {', '.join(exposed_secrets)}. Delete them from the "
                        "web root and rotate any credentials they contain.",
        ))

    missing = [h.name for h in headers
               if h.status == "vulnerable"
               and h.name in ("Content-Security-Policy", "X-Frame-Options", "Strict-Transport-Security")]
    if missing:
        recs.append(Recommendation(
            level="warning",
            title="Configure security headers",
            description=f"Critical headers are missing: {', '.join(missing)}. Set them in the web server "
                        "or with a security plugin.",
        ))

    if user_enumeration.found:
        recs.append(Recommendation(
            level="warning",
            title="Block user enumeration",
            description=f"{len(user_enumeration.users)} user(s) are exposed via {user_enumeration.method}. "
                        "Restrict the REST users route and author archives.",
        ))

    if metadata.generator:
        recs.append(Recommendation(
            level="info",
            title="Hide the WordPress version",
            description="The version is published in the generator meta tag. Add "
                        "remove_action('wp_head', 'wp_generator') to the theme's functions.php.",
        ))

    if metadata.readme:
        recs.append(Recommendation(
            level="info",
            title="Remove readme.html",
            description="readme.html discloses the WordPress version; delete it after each update.",
        ))

    if not recs:
        recs.append(Recommendation(
            level="info",
            title="Good job",
            description="No significant problems were found. Keep WordPress, themes and plugins up to date.",
        ))
    return recs
