"""Configuration module — frozen dataclass loaded from YAML, env vars and CLI args."""

import argparse
import os
import socket
from dataclasses import dataclass, replace

import yaml

from logdna_client.endpoint import INGEST_BASE_URL

DEFAULT_FLUSH_LIMIT = 5000


@dataclass(frozen=True)
class ClientConfig:
    api_key: str = ""
    log_file: str = ""
    hostname: str = ""
    flush_limit: int = DEFAULT_FLUSH_LIMIT
    ingest_url: str = INGEST_BASE_URL
    timeout: float = 10.0
    max_retries: int = 3


def with_defaults(config: ClientConfig) -> ClientConfig:
    """Return *config* with an unset (zero or negative) flush limit defaulted."""
    if config.flush_limit <= 0:
        return replace(config, flush_limit=DEFAULT_FLUSH_LIMIT)
    return config


def load_yaml(path: str) -> dict:
    """Load the ``logdna`` section of a YAML config file.

    A missing file or a file without the section yields an empty dict.
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    if not isinstance(data, dict):
        return {}
    section = data.get("logdna", {})
    return section if isinstance(section, dict) else {}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ship log lines to LogDNA")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--api-key", type=str, default=None)
    parser.add_argument("--log-file", type=str, default=None)
    parser.add_argument("--hostname", type=str, default=None)
    parser.add_argument("--flush-limit", type=int, default=None)
    parser.add_argument("--ingest-url", type=str, default=None)
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--max-retries", type=int, default=None)
    parser.add_argument("input", nargs="?", default="-",
                        help="file to ship, '-' for stdin")
    return parser


def load_client_config(argv=None) -> tuple[ClientConfig, argparse.Namespace]:
    """Build ClientConfig from defaults <- YAML <- env vars <- CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    Returns the config and the parsed arguments.
    """
    args = build_parser().parse_args(argv)

    config_path = args.config or os.environ.get("CONFIG_PATH")
    file_values = load_yaml(config_path) if config_path else {}

    def pick(cli_value, env_name, key, default, cast):
        if cli_value is not None:
            return cli_value
        if env_name in os.environ:
            return cast(os.environ[env_name])
        if key in file_values:
            return cast(file_values[key])
        return default

    config = ClientConfig(
        api_key=pick(args.api_key, "LOGDNA_API_KEY", "api_key", ClientConfig.api_key, str),
        log_file=pick(args.log_file, "LOGDNA_LOG_FILE", "log_file", ClientConfig.log_file, str),
        hostname=pick(args.hostname, "LOGDNA_HOSTNAME", "hostname", socket.gethostname(), str),
        flush_limit=pick(args.flush_limit, "LOGDNA_FLUSH_LIMIT", "flush_limit", ClientConfig.flush_limit, int),
        ingest_url=pick(args.ingest_url, "LOGDNA_INGEST_URL", "ingest_url", ClientConfig.ingest_url, str),
        timeout=pick(args.timeout, "LOGDNA_TIMEOUT", "timeout", ClientConfig.timeout, float),
        max_retries=pick(args.max_retries, "LOGDNA_MAX_RETRIES", "max_retries", ClientConfig.max_retries, int),
    )
    return with_defaults(config), args
