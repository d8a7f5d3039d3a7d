# tests/test_name_normalization.py

from __future__ import annotations

from resource_toolkit.normalization import (
    is_credential,
    is_multi_author,
    normalize_email,
    normalize_name,
)


def test_last_first_with_credential():
    assert normalize_name("Smith, John, MD") == "john smith"


def test_plain_name_is_lowercased():
    assert normalize_name("Jane A. Doe") == "jane a. doe"


def test_credential_only_name_is_empty():
    assert normalize_name("PhD") == ""
    assert normalize_name("MD, PhD") == ""


def test_asides_are_removed():
    assert normalize_name("Jane Doe (retired) [board]") == "jane doe"


def test_credentials_with_periods_and_suffixes():
    assert normalize_name("John Smith Jr. Ph.D.") == "john smith"
    assert is_credential("m.d.")
    assert is_credential("PA-C")
    assert not is_credential("Jane")


def test_single_surviving_comma_segment():
    assert normalize_name("Jane   Doe, LCSW") == "jane doe"


def test_whitespace_is_collapsed():
    assert normalize_name("  Mary \t Ann   Lee ") == "mary ann lee"


def test_email_normalization():
    assert normalize_email("  Jane@Example.ORG ") == "jane@example.org"
    assert normalize_email(None) == ""


def test_multi_author_detection():
    assert is_multi_author("Jane Doe and John Smith")
    assert is_multi_author("Jane Doe & John Smith")
    assert is_multi_author("Jane Doe; John Smith")
    assert not is_multi_author("Jane Doe")
    # "and" must be a whole word
    assert not is_multi_author("Sandra Anderson")
