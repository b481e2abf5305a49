"""Upstream adapters - Passthrough to the protected site."""

from .proxy import UpstreamProxy

__all__ = ["UpstreamProxy"]
