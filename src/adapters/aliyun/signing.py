"""
ACS3-HMAC-SHA256 request signing for Aliyun OpenAPI.

The signer and the server must hash byte-identical canonical requests,
so every step here is deterministic: sorted query keys, RFC 3986
percent-encoding, lower-cased and sorted header names.

    canonical request = METHOD \\n URI \\n query \\n header block \\n signed names \\n body hash
    string to sign    = "ACS3-HMAC-SHA256" \\n sha256_hex(canonical request)
    signature         = hmac_sha256_hex(access_key_secret, string to sign)
"""

import hashlib
import hmac
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

ALGORITHM = "ACS3-HMAC-SHA256"

# sha256 of an empty body
EMPTY_BODY_HASH = hashlib.sha256(b"").hexdigest()


def percent_encode(value: str) -> str:
    """RFC 3986 encoding: only A-Z a-z 0-9 - _ . ~ are left as-is."""
    return quote(value, safe="-_.~")


def canonical_query_string(params: Mapping[str, object]) -> str:
    return "&".join(
        f"{percent_encode(key)}={percent_encode('' if params[key] is None else str(params[key]))}"
        for key in sorted(params)
    )


def canonical_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """
    Build the canonical header block and the signed header list.

    Returns:
        Tuple of (block, signed_names); block has one "name:value\\n"
        line per header, signed_names joins the names with ";"
    """
    lowered = {name.lower(): str(value).strip() for name, value in headers.items()}
    names = sorted(lowered)
    block = "".join(f"{name}:{lowered[name]}\n" for name in names)
    return block, ";".join(names)


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode()).hexdigest()


def hmac_sha256_hex(secret: str, message: str) -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def acs_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC without fractional seconds, e.g. 2024-01-02T03:04:05Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class SignedRequest:
    """Everything needed to send one signed call."""

    url: str
    headers: dict[str, str]
    canonical_request: str


def sign_request(
    *,
    access_key_id: str,
    access_key_secret: str,
    host: str,
    action: str,
    version: str,
    params: Mapping[str, object],
    method: str = "POST",
    timestamp: str | None = None,
    nonce: str | None = None,
) -> SignedRequest:
    """
    Sign an RPC-style call whose payload travels in the query string.

    The body is always empty. timestamp and nonce are generated when not
    given; pass them only to reproduce a signature.
    """
    timestamp = timestamp or acs_timestamp()
    nonce = nonce or str(uuid.uuid4())
    query = canonical_query_string(params)

    signed = {
        "host": host,
        "x-acs-action": action,
        "x-acs-content-sha256": EMPTY_BODY_HASH,
        "x-acs-date": timestamp,
        "x-acs-signature-nonce": nonce,
        "x-acs-version": version,
    }
    header_block, signed_names = canonical_headers(signed)

    canonical_request = "\n".join(
        [method, "/", query, header_block, signed_names, EMPTY_BODY_HASH]
    )
    string_to_sign = f"{ALGORITHM}\n{sha256_hex(canonical_request)}"
    signature = hmac_sha256_hex(access_key_secret, string_to_sign)

    authorization = (
        f"{ALGORITHM} Credential={access_key_id},"
        f"SignedHeaders={signed_names},"
        f"Signature={signature}"
    )

    headers = {name: value for name, value in signed.items() if name != "host"}
    headers["Authorization"] = authorization
    return SignedRequest(
        url=f"https://{host}/?{query}",
        headers=headers,
        canonical_request=canonical_request,
    )
