"""Command-line shipper: reads lines from a file or stdin and sends them to LogDNA."""

import datetime
import logging
import signal
import sys
import threading

from logdna_client.client import LogDNAClient
from logdna_client.config import load_client_config
from logdna_client.errors import DeliveryError


def ship_lines(client: LogDNAClient, lines, shutdown_event: threading.Event) -> int:
    """Log each non-empty line with the current time; return how many were sent."""
    count = 0
    for raw in lines:
        if shutdown_event.is_set():
            break
        line = raw.rstrip("\r\n")
        if not line:
            continue
        client.log(datetime.datetime.now(datetime.timezone.utc), line)
        count += 1
    return count


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    config, args = load_client_config(argv)
    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    if not config.api_key:
        logger.warning("No API key configured; deliveries will be rejected")

    client = LogDNAClient(config)
    logger.info(
        "Shipping %s as file=%s, hostname=%s, flush_limit=%d",
        "stdin" if args.input == "-" else args.input,
        config.log_file,
        config.hostname,
        config.flush_limit,
    )

    count = 0
    try:
        if args.input == "-":
            count = ship_lines(client, sys.stdin, shutdown_event)
        else:
            with open(args.input, "r") as f:
                count = ship_lines(client, f, shutdown_event)
    except KeyboardInterrupt:
        logger.info("Interrupted")

    try:
        client.close()
    except DeliveryError as exc:
        logger.error("Final flush failed, %d lines not delivered: %s", client.size(), exc)
        return 1

    logger.info("Shipped %d lines: %s", count, client.metrics.snapshot())
    return 0


if __name__ == "__main__":
    sys.exit(main())
