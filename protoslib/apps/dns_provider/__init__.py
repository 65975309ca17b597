"""Example DNS provider built on protoslib."""

from protoslib.apps.dns_provider.provider import DNSProvider

__all__ = ["DNSProvider"]
