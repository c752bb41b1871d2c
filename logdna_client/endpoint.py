"""Ingest endpoint construction."""

from dataclasses import dataclass
from urllib.parse import quote, unquote, urlencode, urlsplit, urlunsplit

INGEST_BASE_URL = "https://logs.logdna.com/logs/ingest"

# Unix nanoseconds of the zero instant (0001-01-01 UTC) wrapped to int64,
# the value the ingest API has always been sent for ``now``.
ZERO_TIME_UNIX_NANO = -6795364578871345152


@dataclass(frozen=True)
class IngestEndpoint:
    url: str
    hostname: str

    def credentials(self) -> tuple[str, str] | None:
        """Basic-auth pair from the URL user-info, or None without a key."""
        username = urlsplit(self.url).username
        if not username:
            return None
        return unquote(username), ""

    def redacted(self) -> str:
        """URL with the credential masked, for log messages."""
        parts = urlsplit(self.url)
        netloc = parts.netloc.rsplit("@", 1)[-1]
        if "@" in parts.netloc:
            netloc = "***@" + netloc
        return urlunsplit(parts._replace(netloc=netloc))


def make_ingest_endpoint(
    api_key: str, hostname: str, base_url: str = INGEST_BASE_URL
) -> IngestEndpoint:
    """Build the ingest URL with *api_key* as user-info and the required query.

    Pure and deterministic: no I/O, no validation. An empty key or hostname
    only shows up later as a rejected delivery.
    """
    parts = urlsplit(base_url)
    host = parts.netloc.rsplit("@", 1)[-1]
    netloc = f"{quote(api_key, safe='')}@{host}"
    query = urlencode(
        [("hostname", hostname), ("now", str(ZERO_TIME_UNIX_NANO))]
    )
    url = urlunsplit((parts.scheme, netloc, parts.path, query, ""))
    return IngestEndpoint(url=url, hostname=hostname)
