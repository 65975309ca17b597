"""DNS provider application entrypoint.

Registers as the provider for dns resources, then keeps a local zone in
sync until interrupted:

    TIMER → full reconciliation, NEW_MESSAGE → single record, TERMINATE → deregister

Usage:
    APPID=<app id> python -m protoslib.apps.dns_provider.main --host protos:8080
"""

import argparse
import asyncio
from collections.abc import Callable

from protoslib.apps.dns_provider.provider import DNSProvider
from protoslib.client.protos import ProtosClient
from protoslib.core.config import Settings
from protoslib.core.errors import ConfigurationError, ProtosError
from protoslib.core.logging import get_logger
from protoslib.core.loop import EventLoop, LoopStats
from protoslib.core.registry import HandlerRegistry
from protoslib.transport.base import Transport

DEFAULT_INTERVAL = 30.0


async def start_provider(
    client: ProtosClient,
    transport: Transport | None = None,
    handle_signals: bool = True,
    output_callback: Callable[[str], None] | None = None,
) -> tuple[EventLoop, DNSProvider]:
    """Register the DNS provider and return its event loop, not yet running.

    Raises:
        ProtosError: Registration failed.
    """
    registry = HandlerRegistry()
    provider = DNSProvider(client, output_callback=output_callback)
    provider.attach(registry)
    await provider.register()

    loop = client.event_loop(registry, transport=transport, handle_signals=handle_signals)
    return loop, provider


async def run_provider(
    client: ProtosClient,
    interval: float = DEFAULT_INTERVAL,
    transport: Transport | None = None,
    handle_signals: bool = True,
    output_callback: Callable[[str], None] | None = None,
) -> tuple[LoopStats, DNSProvider]:
    """Register the DNS provider and run its event loop until shutdown.

    Returns:
        A tuple of (LoopStats, DNSProvider) once the loop shut down cleanly.

    Raises:
        ProtosError: Registration failed or the session ended on an error.
    """
    loop, provider = await start_provider(
        client, transport=transport, handle_signals=handle_signals, output_callback=output_callback
    )
    stats = await loop.run(interval)
    return stats, provider


async def _main(args: argparse.Namespace) -> int:
    try:
        settings = Settings.from_env(host=args.host, path_prefix=args.path_prefix)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2
    async with ProtosClient(settings) as client:
        try:
            stats, provider = await run_provider(client, interval=args.interval, output_callback=print)
        except ProtosError as e:
            get_logger("protoslib.apps.dns_provider").error(
                f"DNS provider stopped: {e}", extra={"error": str(e)}
            )
            return 1
    print(f"\nDNS provider stopped: {stats.timer_events} timer events, "
          f"{stats.messages_processed} updates, {len(provider.zone)} records")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Protos DNS provider")
    parser.add_argument("--host", type=str, default=None, help="Protos host[:port]")
    parser.add_argument("--path-prefix", type=str, default=None, help="API path prefix")
    parser.add_argument(
        "--interval", type=float, default=DEFAULT_INTERVAL, help="Seconds between reconciliations"
    )
    args = parser.parse_args()
    raise SystemExit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
