"""Tests for configuration redaction and fingerprinting."""

import pytest

from core.fingerprint import fingerprint, is_credential, is_numeric, redact


BASE = {
    "APIKEY": "live-key",
    "APISECRET": "live-secret",
    "MARKET": "BTC-EUR",
    "SENTIMENT_THRESHOLD": "55",
    "ORDER_BOOK_DEPTH": "100",
    "MINIMUM_DIFFERENCE_FOR_ANALYSIS": "0.005",
    "MAX_DIFFERENCE_FOR_HOLD": "0.01",
    "HOURS_TO_KEEP_REDIS_DATA": "24",
}


class TestIsCredential:
    @pytest.mark.parametrize(
        "key",
        ["APIKEY", "APISECRET", "api_key", "DB_PASSWORD", "AUTH_TOKEN", "Telegram_Token"],
    )
    def test_credentials(self, key):
        assert is_credential(key)

    @pytest.mark.parametrize(
        "key",
        ["MARKET", "SENTIMENT_THRESHOLD", "HOURS_TO_KEEP_REDIS_DATA", "ORDER_BOOK_DEPTH"],
    )
    def test_non_credentials(self, key):
        assert not is_credential(key)


class TestIsNumeric:
    @pytest.mark.parametrize("value", ["1", "0.005", "-3", "1e-3", " 42 "])
    def test_numeric(self, value):
        assert is_numeric(value)

    @pytest.mark.parametrize("value", [None, "", "BTC-EUR", "true", "nan", "inf"])
    def test_not_numeric(self, value):
        assert not is_numeric(value)


class TestRedact:
    def test_drops_credentials_keeps_rest(self):
        redacted = redact(BASE)
        assert "APIKEY" not in redacted
        assert "APISECRET" not in redacted
        assert redacted["MARKET"] == "BTC-EUR"
        assert redacted["SENTIMENT_THRESHOLD"] == "55"

    def test_none_values_become_empty_strings(self):
        assert redact({"FLAG": None}) == {"FLAG": ""}


class TestFingerprint:
    def test_numeric_non_secret_values_only(self):
        assert fingerprint(BASE) == "24_0.01_0.005_100_55"

    def test_credentials_do_not_affect_fingerprint(self):
        other = {**BASE, "APIKEY": "12345", "APISECRET": "999", "AUTH_TOKEN": "7"}
        assert fingerprint(other) == fingerprint(BASE)

    def test_entry_order_does_not_matter(self):
        reordered = dict(reversed(list(BASE.items())))
        assert fingerprint(reordered) == fingerprint(BASE)

    def test_different_values_differ(self):
        assert fingerprint({**BASE, "SENTIMENT_THRESHOLD": "60"}) != fingerprint(BASE)

    def test_empty(self):
        assert fingerprint({}) == ""
