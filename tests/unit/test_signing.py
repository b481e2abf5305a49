"""
Unit tests for ACS3-HMAC-SHA256 signing.

Tests verify each canonicalization step and that the final signature
is the HMAC of the hashed canonical request.
"""

import hashlib
import hmac
import re
from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.aliyun.signing import (
    ALGORITHM,
    EMPTY_BODY_HASH,
    acs_timestamp,
    canonical_headers,
    canonical_query_string,
    percent_encode,
    sign_request,
)

FIXED = {
    "access_key_id": "LTAI-test",
    "access_key_secret": "secret",
    "host": "dypnsapi.aliyuncs.com",
    "action": "CheckSmsVerifyCode",
    "version": "2017-05-25",
    "timestamp": "2024-01-02T03:04:05Z",
    "nonce": "3f1b6c1e-0000-4000-8000-000000000000",
}


class TestPercentEncode:
    """Tests for RFC 3986 percent-encoding."""

    def test_unreserved_characters_untouched(self) -> None:
        assert percent_encode("AZaz09-_.~") == "AZaz09-_.~"

    @pytest.mark.parametrize(
        ("raw", "encoded"),
        [
            (" ", "%20"),
            ("!", "%21"),
            ("'", "%27"),
            ("(", "%28"),
            (")", "%29"),
            ("*", "%2A"),
            ("/", "%2F"),
            ("+", "%2B"),
            ("=", "%3D"),
            ("&", "%26"),
            ("#", "%23"),
            (":", "%3A"),
            ('"', "%22"),
            ("{", "%7B"),
        ],
    )
    def test_reserved_characters_encoded_upper_hex(self, raw, encoded) -> None:
        assert percent_encode(raw) == encoded

    def test_utf8_multibyte(self) -> None:
        assert percent_encode("签名") == "%E7%AD%BE%E5%90%8D"

    def test_template_param_json(self) -> None:
        assert (
            percent_encode('{"code":"##code##","min":"5"}')
            == "%7B%22code%22%3A%22%23%23code%23%23%22%2C%22min%22%3A%225%22%7D"
        )


class TestCanonicalQuery:
    """Tests for the canonical query string."""

    def test_keys_sorted(self) -> None:
        assert canonical_query_string({"b": "2", "a": "1", "C": "3"}) == "C=3&a=1&b=2"

    def test_independent_of_insertion_order(self) -> None:
        first = canonical_query_string({"PhoneNumber": "1", "CountryCode": "86", "VerifyCode": "x"})
        second = canonical_query_string({"VerifyCode": "x", "PhoneNumber": "1", "CountryCode": "86"})
        assert first == second

    def test_values_encoded(self) -> None:
        assert canonical_query_string({"SignName": "a b"}) == "SignName=a%20b"

    def test_none_and_numbers(self) -> None:
        assert canonical_query_string({"a": None, "b": 6}) == "a=&b=6"

    def test_empty(self) -> None:
        assert canonical_query_string({}) == ""


class TestCanonicalHeaders:
    """Tests for the canonical header block and signed header list."""

    def test_lowercased_sorted_and_trimmed(self) -> None:
        block, names = canonical_headers({"X-Acs-Version": " 2017-05-25 ", "Host": "h"})

        assert block == "host:h\nx-acs-version:2017-05-25\n"
        assert names == "host;x-acs-version"


class TestTimestamp:
    """Tests for the x-acs-date format."""

    def test_no_fractional_seconds(self) -> None:
        moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

        assert acs_timestamp(moment) == "2024-01-02T03:04:05Z"

    def test_converted_to_utc(self) -> None:
        moment = datetime(2024, 1, 2, 11, 4, 5, tzinfo=timezone(timedelta(hours=8)))

        assert acs_timestamp(moment) == "2024-01-02T03:04:05Z"

    def test_default_is_now(self) -> None:
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ", acs_timestamp())


class TestSignRequest:
    """Tests for the assembled signed request."""

    def test_canonical_request_layout(self) -> None:
        signed = sign_request(params={"VerifyCode": "1234", "PhoneNumber": "138"}, **FIXED)

        expected = "\n".join(
            [
                "POST",
                "/",
                "PhoneNumber=138&VerifyCode=1234",
                "host:dypnsapi.aliyuncs.com\n"
                "x-acs-action:CheckSmsVerifyCode\n"
                f"x-acs-content-sha256:{EMPTY_BODY_HASH}\n"
                "x-acs-date:2024-01-02T03:04:05Z\n"
                f"x-acs-signature-nonce:{FIXED['nonce']}\n"
                "x-acs-version:2017-05-25\n",
                "host;x-acs-action;x-acs-content-sha256;x-acs-date;x-acs-signature-nonce;x-acs-version",
                EMPTY_BODY_HASH,
            ]
        )
        assert signed.canonical_request == expected

    def test_signature_is_hmac_of_hashed_canonical_request(self) -> None:
        signed = sign_request(params={"PhoneNumber": "138"}, **FIXED)

        digest = hashlib.sha256(signed.canonical_request.encode()).hexdigest()
        string_to_sign = f"{ALGORITHM}\n{digest}"
        signature = hmac.new(b"secret", string_to_sign.encode(), hashlib.sha256).hexdigest()

        assert signed.headers["Authorization"] == (
            f"ACS3-HMAC-SHA256 Credential=LTAI-test,"
            "SignedHeaders=host;x-acs-action;x-acs-content-sha256;x-acs-date;"
            f"x-acs-signature-nonce;x-acs-version,Signature={signature}"
        )

    def test_deterministic_for_same_inputs(self) -> None:
        first = sign_request(params={"a": "1"}, **FIXED)
        second = sign_request(params={"a": "1"}, **FIXED)

        assert first == second

    def test_nonce_changes_signature(self) -> None:
        first = sign_request(params={"a": "1"}, **FIXED)
        second = sign_request(params={"a": "1"}, **{**FIXED, "nonce": "other"})

        assert first.headers["Authorization"] != second.headers["Authorization"]

    def test_fresh_nonce_per_request(self) -> None:
        fixed = {k: v for k, v in FIXED.items() if k != "nonce"}

        first = sign_request(params={"a": "1"}, **fixed)
        second = sign_request(params={"a": "1"}, **fixed)

        assert first.headers["x-acs-signature-nonce"] != second.headers["x-acs-signature-nonce"]

    def test_headers_sent(self) -> None:
        signed = sign_request(params={"a": "1"}, **FIXED)

        assert signed.headers["x-acs-action"] == "CheckSmsVerifyCode"
        assert signed.headers["x-acs-version"] == "2017-05-25"
        assert signed.headers["x-acs-date"] == "2024-01-02T03:04:05Z"
        assert signed.headers["x-acs-signature-nonce"] == FIXED["nonce"]
        assert signed.headers["x-acs-content-sha256"] == EMPTY_BODY_HASH
        assert "host" not in signed.headers

    def test_url_carries_canonical_query(self) -> None:
        signed = sign_request(params={"b": "x y", "a": "1"}, **FIXED)

        assert signed.url == "https://dypnsapi.aliyuncs.com/?a=1&b=x%20y"

    def test_empty_body_hash_constant(self) -> None:
        assert EMPTY_BODY_HASH == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
