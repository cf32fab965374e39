"""Tests for email normalisation and validation."""

import pytest
from protean.exceptions import ValidationError

from storefront.shared.email import ensure_valid_email, is_valid_email, normalize_email


def test_normalize_trims_and_lowercases():
    assert normalize_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"


@pytest.mark.parametrize(
    "address",
    ["jane@example.com", "jane.doe+shop@mail.example.co.uk", "a_b@sub-domain.example.org"],
)
def test_valid_addresses(address):
    assert is_valid_email(address)


@pytest.mark.parametrize(
    "address",
    [
        "",
        "plainaddress",
        "two@@example.com",
        "jane@localhost",
        "jane..doe@example.com",
        ".jane@example.com",
        "jane@-example.com",
        "jane doe@example.com",
        "jane<doe>@example.com",
    ],
)
def test_invalid_addresses(address):
    assert not is_valid_email(address)


def test_ensure_valid_email_reports_field():
    with pytest.raises(ValidationError) as exc_info:
        ensure_valid_email("nope", field="contact")
    assert "contact" in exc_info.value.messages
