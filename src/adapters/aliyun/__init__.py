"""Aliyun adapters - Signed Dypnsapi verification client."""

from .client import AliyunVerificationClient, interpret_response
from .signing import sign_request

__all__ = ["AliyunVerificationClient", "interpret_response", "sign_request"]
