# src/tools/zap_simulator.py
"""
ZapSimulatorAdapter: OWASP ZAP-shaped findings without touching the network.

The target is only echoed back; no request is ever made to it.
"""
from .base import SecurityToolAdapter

FINDING_CATALOGUE = (
    {
        "title": "XSS: Unescaped user input",
        "owasp": "A03:2021-Injection",
        "risk": 4,
        "fix": "Encode output, adopt CSP 'strict-dynamic', use trusted templating.",
    },
    {
        "title": "Missing Security Headers",
        "owasp": "A05:2021-Security Misconfiguration",
        "risk": 3,
        "fix": "Add HSTS, X-Content-Type-Options, Frame-Options/COOP/COEP, CSP.",
    },
    {
        "title": "Permissive CORS",
        "owasp": "A05:2021-Security Misconfiguration",
        "risk": 3,
        "fix": "Restrict origins, drop credentials for '*', validate preflight.",
    },
)


class ZapSimulatorAdapter(SecurityToolAdapter):
    def __init__(self, catalogue=FINDING_CATALOGUE):
        self.catalogue = catalogue

    def run_scan(self, target: str) -> dict:
        return {
            "success": True,
            "target": target,
            "result": [dict(alert) for alert in self.catalogue],
        }
