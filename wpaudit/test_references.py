# wpaudit/test_references.py
from wpaudit.models import EndpointFinding, HeaderFinding
from wpaudit.references import (
    ENDPOINT_REFERENCES,
    HEADER_REFERENCES,
    aggregate_severity,
    detect_waf,
    get_reference,
    severity_band,
)
from wpaudit.probes import SECURITY_HEADERS, SENSITIVE_ENDPOINTS


def _endpoint(path, status="accessible"):
    ep = next(e for e in SENSITIVE_ENDPOINTS if e["path"] == path)
    return EndpointFinding(
        name=ep["name"], path=path, url="https://site.test" + path, status=status,
        status_code=200, risk=ep["risk"], description=ep["description"],
        reference=get_reference("endpoint", path),
    )


def _missing_header(name):
    return HeaderFinding(name=name, status="vulnerable", description="missing",
                         reference=get_reference("header", name))


def test_severity_bands():
    assert severity_band(0) == "None"
    assert severity_band(0.1) == "Low"
    assert severity_band(3.9) == "Low"
    assert severity_band(4.0) == "Medium"
    assert severity_band(6.9) == "Medium"
    assert severity_band(7.0) == "High"
    assert severity_band(8.9) == "High"
    assert severity_band(9.0) == "Critical"
    assert severity_band(10.0) == "Critical"


def test_every_probe_has_a_reference():
    for header in SECURITY_HEADERS:
        assert header["name"] in HEADER_REFERENCES
    for ep in SENSITIVE_ENDPOINTS:
        assert ep["path"] in ENDPOINT_REFERENCES


def test_reference_severity_matches_score():
    for ref in list(HEADER_REFERENCES.values()) + list(ENDPOINT_REFERENCES.values()):
        assert ref.severity == severity_band(ref.score)
        assert ref.vector.startswith("CVSS:3.1/")


def test_get_reference_unknown():
    assert get_reference("header", "X-Nope") is None
    assert get_reference("endpoint", "/nope") is None
    assert get_reference("something-else") is None
    assert get_reference("user-enumeration").score == 5.3


def test_detect_waf_uses_declaration_order():
    # both Cloudflare and Sucuri markers present; Cloudflare is declared first
    headers = {"X-Sucuri-ID": "1", "Server": "cloudflare"}
    assert detect_waf(headers) == "Cloudflare"
    assert detect_waf({"X-Sucuri-Cache": "HIT"}) == "Sucuri"
    assert detect_waf({"Server": "nginx"}) is None


def test_aggregate_severity_empty():
    result = aggregate_severity([], [], False, False)
    assert result.score == 0.0
    assert result.severity == "None"
    assert result.vector == "Max: 0.0, Issues: 0"


def test_aggregate_severity_two_exposures():
    result = aggregate_severity([], [_endpoint("/.git/"), _endpoint("/xmlrpc.php")], False, False)
    assert result.score == 7.5
    assert result.severity == "High"
    assert result.vector == "Max: 7.5, Issues: 2"


def test_aggregate_severity_weights_worst_and_mean():
    # worst 5.3, mean 4.8 -> 0.6*5.3 + 0.4*4.8 = 5.1
    result = aggregate_severity([_missing_header("Content-Security-Policy")], [], True, False)
    assert result.score == 5.1
    assert result.severity == "Medium"


def test_aggregate_severity_ignores_blocked_and_secure():
    headers = [HeaderFinding(name="X-Frame-Options", status="secure", description="ok",
                             reference=get_reference("header", "X-Frame-Options"))]
    endpoints = [_endpoint("/.env", status="blocked")]
    assert aggregate_severity(headers, endpoints, False, False).score == 0.0


def test_aggregate_severity_is_deterministic():
    args = ([_missing_header("Strict-Transport-Security")], [_endpoint("/.env")], True, True)
    assert aggregate_severity(*args) == aggregate_severity(*args)
