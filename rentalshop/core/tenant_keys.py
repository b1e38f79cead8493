"""
Tenant key helpers

Tenant keys double as subdomains (``<key>.<root domain>``), so they are
compared case-insensitively and restricted to DNS-safe characters.
"""

from typing import Optional
import re
import unicodedata

RESERVED_TENANT_KEYS = (
    "www", "api", "admin", "app", "mail", "ftp",
    "smtp", "client", "www2", "test", "demo", "staging",
)

MAX_TENANT_KEY_LENGTH = 50

_TENANT_KEY_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,48}[a-z0-9])?$")


def normalize_tenant_key(key: str) -> str:
    """Normalize a tenant key for comparison and caching"""
    return key.strip().lower()


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # đ/Đ have no decomposition
    return stripped.replace("đ", "d").replace("Đ", "D")


def sanitize_tenant_key(text: Optional[str]) -> str:
    """Build a tenant key candidate from free text such as a business name"""
    if not text:
        return ""
    sanitized = _strip_diacritics(text).lower().strip()
    sanitized = re.sub(r"[^a-z0-9]", "", sanitized)
    return sanitized[:MAX_TENANT_KEY_LENGTH]


def is_reserved_tenant_key(key: str) -> bool:
    return key.lower() in RESERVED_TENANT_KEYS


def validate_tenant_key(key: Optional[str]) -> bool:
    """Check that a tenant key is usable as a subdomain"""
    if not key:
        return False
    if is_reserved_tenant_key(key):
        return False
    return bool(_TENANT_KEY_PATTERN.match(key))


def extract_tenant_key(host: Optional[str], root_domain: Optional[str] = None) -> Optional[str]:
    """
    Extract the tenant key from a request host.

    ``shop.localhost:3000`` and ``shop.example.com`` both yield ``shop``;
    the bare root domain, ``www`` and other reserved keys yield None.
    """
    if not host:
        return None

    hostname = host.split(":")[0].lower()
    parts = hostname.split(".")

    if root_domain:
        root = root_domain.split(":")[0].lower()
        if hostname in (root, f"www.{root}"):
            return None

    candidate = None
    if len(parts) >= 2 and parts[-1] == "localhost":
        candidate = parts[0]
    elif len(parts) > 2:
        candidate = parts[0]

    if not candidate or is_reserved_tenant_key(candidate):
        return None
    return candidate
