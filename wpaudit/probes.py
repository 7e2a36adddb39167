# wpaudit/probes.py
# Fixed probe sets used by the scans.

SECURITY_HEADERS = [
    {"name": "Content-Security-Policy", "critical": True},
    {"name": "X-Frame-Options", "critical": True},
    {"name": "X-Content-Type-Options", "critical": True},
    {"name": "Strict-Transport-Security", "critical": True},
    {"name": "Referrer-Policy", "critical": False},
    {"name": "Permissions-Policy", "critical": False},
    {"name": "X-XSS-Protection", "critical": False},
    {"name": "Cross-Origin-Opener-Policy", "critical": False},
    {"name": "Cross-Origin-Embedder-Policy", "critical": False},
]

CRITICAL_HEADERS = {h["name"] for h in SECURITY_HEADERS if h["critical"]}

DISCLOSURE_HEADERS = ["Server", "X-Powered-By"]

HSTS_MIN_MAX_AGE = 31536000

SENSITIVE_ENDPOINTS = [
    {"path": "/xmlrpc.php", "name": "XML-RPC", "risk": "critical",
     "description": "XML-RPC can be abused for brute-force and amplified DDoS attacks."},
    {"path": "/wp-login.php", "name": "WP Login", "risk": "medium",
     "description": "Login page is publicly reachable."},
    {"path": "/wp-admin/", "name": "WP Admin", "risk": "medium",
     "description": "Administration panel is reachable."},
    {"path": "/wp-json/", "name": "REST API", "risk": "info",
     "description": "WordPress REST API is enabled."},
    {"path": "/wp-content/debug.log", "name": "Debug Log", "risk": "critical",
     "description": "Debug log exposed, usually contains paths, queries and errors."},
    {"path": "/wp-config.php.bak", "name": "Config Backup", "risk": "critical",
     "description": "Configuration backup with database credentials."},
    {"path": "/wp-config.php~", "name": "Config Temp", "risk": "critical",
     "description": "Editor temporary copy of the configuration file."},
    {"path": "/.git/", "name": "Git Exposed", "risk": "critical",
     "description": "Git repository exposed, source code and history can be downloaded."},
    {"path": "/.env", "name": "Env File", "risk": "critical",
     "description": "Environment file with secrets."},
    {"path": "/backup.sql", "name": "SQL Backup", "risk": "critical",
     "description": "Database dump exposed."},
    {"path": "/database.sql", "name": "DB Backup", "risk": "critical",
     "description": "Database dump exposed."},
    {"path": "/wp-admin/install.php", "name": "Install Script", "risk": "critical",
     "description": "Installer script is reachable."},
    {"path": "/.htaccess", "name": "htaccess", "risk": "high",
     "description": "Web server configuration exposed."},
    {"path": "/phpinfo.php", "name": "PHP Info", "risk": "high",
     "description": "phpinfo() output exposes PHP and server configuration."},
    {"path": "/wp-cron.php", "name": "WP Cron", "risk": "medium",
     "description": "WordPress cron is publicly triggerable, can be used for DoS."},
    {"path": "/readme.html", "name": "Readme", "risk": "low",
     "description": "Readme file reveals the WordPress version."},
    {"path": "/wp-content/uploads/", "name": "Uploads Dir", "risk": "low",
     "description": "Uploads directory may be listable."},
    {"path": "/wp-content/plugins/", "name": "Plugins Dir", "risk": "low",
     "description": "Plugin directory listing is visible."},
    {"path": "/wp-includes/", "name": "WP Includes", "risk": "info",
     "description": "Includes directory is reachable."},
]

RISK_DEDUCTIONS = {"critical": 12, "high": 8, "medium": 4, "low": 2, "info": 0}

# WordPress signatures, matched case-insensitively against page HTML
STRONG_SIGNATURES = [
    "wp-content",
    "wp-includes",
    "wp-json",
    "xmlrpc.php",
    "wp-login.php",
    "woocommerce",
]
GENERATOR_PATTERN = r"<meta[^>]*name=[\"']generator[\"'][^>]*content=[\"']WordPress\s*([\d.]+)?"
WEAK_SIGNATURES = ["wordpress", "/themes/", "/plugins/"]

SUBDIRECTORY_CANDIDATES = ["/blog", "/wordpress", "/wp", "/news"]
USER_ENUM_SUBDIRECTORIES = ["/blog", "/wordpress", "/wp"]

# anti-bot / challenge pages served instead of the real site
CHALLENGE_MARKERS = [
    "cf-chl",
    "just a moment...",
    "attention required! | cloudflare",
    "sucuri website firewall",
    "_incapsula_resource",
]

BLOCK_STATUSES = {401, 403, 406, 429}
