from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from sitecheck.config import settings
from sitecheck.models import Config

logger = logging.getLogger(__name__)


def read_urls_from_file(path: Path) -> list[str]:
    """One URL per line; blank lines and ``#`` comments are skipped."""
    urls: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        urls.append(line)
    return urls


def parse_header(raw: str) -> tuple[str, str] | None:
    name, sep, value = raw.partition(":")
    if not sep:
        return None
    return name.strip(), value.strip()


def parse_headers(raw: Iterable[str]) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for item in raw:
        parsed = parse_header(item)
        if parsed is None:
            logger.warning("Ignoring malformed header rule (expected 'Name: Value'): %r", item)
            continue
        out.append(parsed)
    return out


def load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file at {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    headers = data.get("headers") or []
    if isinstance(headers, dict):
        data["headers"] = [(str(k), str(v)) for k, v in headers.items()]
    else:
        data["headers"] = parse_headers(str(h) for h in headers)

    data["urls"] = [str(u).strip() for u in data.get("urls") or [] if str(u).strip()]
    return data


def _first(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


def build_config(args: argparse.Namespace) -> Config:
    """Merge CLI flags, an optional YAML file and environment defaults.

    Precedence is CLI > YAML > environment. URLs are concatenated from the YAML
    file, then the URL file, then positional arguments.
    """
    file_cfg: dict[str, Any] = {}
    if getattr(args, "config", None):
        file_cfg = load_config_file(Path(args.config))

    urls: list[str] = list(file_cfg.get("urls", []))
    if getattr(args, "file", None):
        urls.extend(read_urls_from_file(Path(args.file)))
    urls.extend(getattr(args, "urls", None) or [])

    headers = list(file_cfg.get("headers", []))
    headers.extend(parse_headers(getattr(args, "header", None) or []))

    return Config(
        worker_threads=_first(args.threads, file_cfg.get("threads"), settings.THREADS),
        timeout_s=_first(args.timeout, file_cfg.get("timeout_s"), settings.TIMEOUT_S),
        max_retries=_first(args.retries, file_cfg.get("retries"), settings.RETRIES),
        period_s=_first(args.period, file_cfg.get("period_s"), settings.PERIOD_S),
        headers=tuple(headers),
        contains=_first(args.contains, file_cfg.get("contains")),
        urls=tuple(urls),
    )


def parse_bind(raw: str) -> tuple[str, int]:
    """``HOST:PORT``, ``:PORT`` or ``PORT``; host defaults to 127.0.0.1."""
    host, sep, port = raw.rpartition(":")
    if not sep:
        host, port = "", raw
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid --serve address {raw!r}: port must be a number") from None
    if not 0 < port_num < 65536:
        raise ValueError(f"invalid --serve address {raw!r}: port out of range")
    return host or "127.0.0.1", port_num
