"""
Tenant key helper tests
"""

import pytest

from rentalshop.core.tenant_keys import (
    extract_tenant_key,
    is_reserved_tenant_key,
    normalize_tenant_key,
    sanitize_tenant_key,
    validate_tenant_key,
)


def test_normalize_tenant_key():
    assert normalize_tenant_key("  Foo  ") == "foo"
    assert normalize_tenant_key("foo") == "foo"


@pytest.mark.parametrize("text,expected", [
    ("Cửa Hàng Đồ Thuê", "cuahangdothue"),
    ("Rent-A-Bike Co.", "rentabikeco"),
    ("  Ski Shop 24  ", "skishop24"),
    ("", ""),
    (None, ""),
])
def test_sanitize_tenant_key(text, expected):
    assert sanitize_tenant_key(text) == expected


def test_sanitize_truncates_to_fifty_characters():
    assert len(sanitize_tenant_key("a" * 80)) == 50


@pytest.mark.parametrize("key,valid", [
    ("rentals", True),
    ("bike-shop-2", True),
    ("a", True),
    ("-leading", False),
    ("trailing-", False),
    ("Upper", False),
    ("under_score", False),
    ("admin", False),
    ("www", False),
    ("", False),
    (None, False),
    ("a" * 51, False),
])
def test_validate_tenant_key(key, valid):
    assert validate_tenant_key(key) is valid


def test_reserved_keys_are_case_insensitive():
    assert is_reserved_tenant_key("API")
    assert not is_reserved_tenant_key("rentals")


@pytest.mark.parametrize("host,expected", [
    ("rentals.localhost:3000", "rentals"),
    ("rentals.example.com", "rentals"),
    ("Rentals.Example.com", "rentals"),
    ("example.com", None),
    ("www.example.com", None),
    ("api.example.com", None),
    ("localhost:8000", None),
    ("", None),
    (None, None),
])
def test_extract_tenant_key(host, expected):
    assert extract_tenant_key(host, "example.com") == expected


def test_extract_ignores_root_domain_with_port():
    assert extract_tenant_key("app.localhost:8000", "app.localhost:8000") is None
