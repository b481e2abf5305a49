"""
Aliyun Dypnsapi adapter - Implements VerificationApi protocol.

Calls SendSmsVerifyCode and CheckSmsVerifyCode over a shared
httpx.AsyncClient. Each call is signed with ACS3-HMAC-SHA256 and sent
exactly once.

Responses are normalized to Success/Failure. Success only means the call
went through (HTTP 2xx, Code == "OK", Success is true); for checks the
verdict still has to be read from Model.VerifyResult.
"""

import json
import logging
import math

import httpx

from src.domain.exceptions import ConfigurationError
from src.domain.ports import Failure, Outcome, Success

from .signing import sign_request

logger = logging.getLogger(__name__)

SEND_ACTION = "SendSmsVerifyCode"
CHECK_ACTION = "CheckSmsVerifyCode"

# Placeholder the service replaces with a code it generates itself
GENERATED_CODE = "##code##"


def mask_phone(phone: str) -> str:
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 4) + phone[-4:]


class AliyunVerificationClient:
    """
    Implements VerificationApi protocol via the Dypnsapi OpenAPI.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        access_key_id: str,
        access_key_secret: str,
        endpoint: str = "dypnsapi.aliyuncs.com",
        api_version: str = "2017-05-25",
    ) -> None:
        self._http = http
        self._access_key_id = access_key_id
        self._access_key_secret = access_key_secret
        self._endpoint = endpoint
        self._api_version = api_version

    async def dispatch_code(
        self,
        phone: str,
        country_code: str,
        sign_name: str,
        template_code: str,
        code_length: int,
        valid_time_seconds: int,
        interval_seconds: int,
        code_type: int,
    ) -> Outcome:
        """
        Have the service generate a code and send it by SMS.

        TemplateParam carries the ##code## placeholder, never a literal
        code.

        Raises:
            ConfigurationError: If credentials, phone, sign name or
                template code are missing
        """
        self._require(
            TARGET_PHONE=phone,
            ALIYUN_SIGN_NAME=sign_name,
            ALIYUN_TEMPLATE_CODE=template_code,
        )
        minutes = max(1, math.ceil(valid_time_seconds / 60))
        params = {
            "PhoneNumber": phone,
            "CountryCode": country_code,
            "SignName": sign_name,
            "TemplateCode": template_code,
            "TemplateParam": json.dumps(
                {"code": GENERATED_CODE, "min": str(minutes)}, separators=(",", ":")
            ),
            "CodeLength": str(code_length),
            "ValidTime": str(valid_time_seconds),
            "Interval": str(interval_seconds),
            "CodeType": str(code_type),
            "ReturnVerifyCode": "false",
            "AutoRetry": "1",
        }
        logger.info("Dispatching verification code to %s", mask_phone(phone))
        return await self._call(SEND_ACTION, params)

    async def check_code(self, phone: str, country_code: str, submitted_code: str) -> Outcome:
        """
        Ask the service to check a code. Inspect Model.VerifyResult on Success.

        Raises:
            ConfigurationError: If credentials or phone are missing
        """
        self._require(TARGET_PHONE=phone)
        params = {
            "PhoneNumber": phone,
            "CountryCode": country_code,
            "VerifyCode": submitted_code,
            "CaseAuthPolicy": "1",
        }
        return await self._call(CHECK_ACTION, params)

    def _require(self, **values: str) -> None:
        required = {
            "ALIYUN_ACCESS_KEY_ID": self._access_key_id,
            "ALIYUN_ACCESS_KEY_SECRET": self._access_key_secret,
            **values,
        }
        for setting, value in required.items():
            if not value:
                raise ConfigurationError(setting)

    async def _call(self, action: str, params: dict[str, str]) -> Outcome:
        signed = sign_request(
            access_key_id=self._access_key_id,
            access_key_secret=self._access_key_secret,
            host=self._endpoint,
            action=action,
            version=self._api_version,
            params=params,
        )
        try:
            response = await self._http.post(signed.url, headers=signed.headers)
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", action, exc.__class__.__name__)
            return Failure(f"Request failed ({exc.__class__.__name__})")
        return interpret_response(action, response)


def interpret_response(action: str, response: httpx.Response) -> Outcome:
    """Normalize a Dypnsapi response into Success or Failure."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        data = {}

    if not response.is_success:
        logger.warning("%s returned HTTP %s", action, response.status_code)
        return Failure(f"HTTP {response.status_code}")

    if data.get("Code") == "OK" and data.get("Success") is True:
        return Success(data)

    message = data.get("Message") or data.get("Code") or "Unknown error"
    logger.warning("%s rejected: %s", action, message)
    return Failure(str(message))
