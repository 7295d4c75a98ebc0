"""Tests for prefix and directory normalization."""

import os

import pytest
from nsautoload.normalize import normalize_directory
from nsautoload.normalize import normalize_namespace


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Acme", "Acme."),
        ("Acme.Billing", "Acme.Billing."),
        ("Acme\\Billing", "Acme.Billing."),
        ("Acme/Billing/", "Acme.Billing."),
        ("Acme\\Billing\\\\", "Acme.Billing."),
        ("Acme.Billing...", "Acme.Billing."),
    ],
)
def test_normalize_namespace(raw, expected):
    assert normalize_namespace(raw) == expected


def test_normalize_directory_uses_os_sep():
    assert normalize_directory("src\\acme/billing") == os.sep.join(["src", "acme", "billing"]) + os.sep


def test_normalize_directory_single_trailing_separator():
    assert normalize_directory("src/acme///") == f"src{os.sep}acme{os.sep}"


def test_normalize_directory_accepts_pathlike(tmp_path):
    assert normalize_directory(tmp_path) == str(tmp_path) + os.sep


@pytest.mark.parametrize("raw", ["Acme", "Acme\\Billing\\", "A/B/C", "Acme.Billing."])
def test_normalize_namespace_is_idempotent(raw):
    once = normalize_namespace(raw)
    assert normalize_namespace(once) == once


@pytest.mark.parametrize("raw", ["src", "src\\acme\\", "/srv/app//lib", "C:\\code\\acme"])
def test_normalize_directory_is_idempotent(raw):
    once = normalize_directory(raw)
    assert normalize_directory(once) == once
