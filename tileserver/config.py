from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from tileserver.fetcher import DEFAULT_USER_AGENT
from tileserver.urls import TilesType


DEFAULT_CONFIG_PATH = "config/params.yaml"
DEFAULT_LISTEN_ADDR = ":8080"

# Environment overrides (applied on top of the YAML file)
ENV_API_KEY = "APIKEYPROD"
ENV_TILES_TYPE = "TILES_TYPE"
ENV_TILES_YEAR = "TILES_YEAR"
ENV_LOG_LEVEL = "LOG_LEVEL"


@dataclass
class ServerConfig:
    listen_addr: str = DEFAULT_LISTEN_ADDR
    api_key: str = field(default="", repr=False)
    tiles_type: str = TilesType.VERT.value
    year: int = 0
    require_api_key: bool = False
    fetch_timeout_s: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT
    cors_allow_origins: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    @property
    def host_port(self) -> Tuple[str, int]:
        return parse_listen_addr(self.listen_addr)


def parse_listen_addr(addr: str) -> Tuple[str, int]:
    """
    "host:port" -> (host, port). Empty host (":8080") binds all interfaces.
    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"listen address must be host:port, got {addr!r}")
    try:
        port_n = int(port)
    except ValueError:
        raise ValueError(f"invalid port in listen address {addr!r}") from None
    if not (0 <= port_n <= 65535):
        raise ValueError(f"port out of range in listen address {addr!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_n


def _read_yaml(path: str) -> Dict:
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """
    Build the server config.

    Precedence (low -> high): built-in defaults, YAML file, environment.
    A missing file is not an error; the defaults are used.
    """
    env = os.environ if env is None else env
    P = _read_yaml(path or DEFAULT_CONFIG_PATH)

    server = P.get("server", {}) or {}
    nearmap = P.get("nearmap", {}) or {}
    fetch = P.get("fetch", {}) or {}
    cors = P.get("cors", {}) or {}
    logging_cfg = P.get("logging", {}) or {}

    cfg = ServerConfig(
        listen_addr=str(server.get("listen_addr", DEFAULT_LISTEN_ADDR)),
        api_key=str(nearmap.get("api_key") or ""),
        tiles_type=str(nearmap.get("tiles_type", TilesType.VERT.value)),
        year=int(nearmap.get("year", 0) or 0),
        require_api_key=bool(nearmap.get("require_api_key", False)),
        fetch_timeout_s=None if fetch.get("timeout_s") is None else float(fetch["timeout_s"]),
        user_agent=str(fetch.get("user_agent", DEFAULT_USER_AGENT)),
        cors_allow_origins=[str(o) for o in (cors.get("allow_origins") or [])],
        log_level=str(logging_cfg.get("level", "INFO")),
    )

    if env.get(ENV_API_KEY):
        cfg.api_key = env[ENV_API_KEY]
    if env.get(ENV_TILES_TYPE):
        cfg.tiles_type = env[ENV_TILES_TYPE]
    if env.get(ENV_TILES_YEAR):
        cfg.year = int(env[ENV_TILES_YEAR])
    if env.get(ENV_LOG_LEVEL):
        cfg.log_level = env[ENV_LOG_LEVEL]

    # fail fast on typos
    TilesType(cfg.tiles_type)
    parse_listen_addr(cfg.listen_addr)
    return cfg
