"""Configuration of the actions module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import yaml

DEFAULT_PORT = 3000


@dataclass(frozen=True)
class ActionsConfig:
    """Where the actions server listens and, optionally, which node it queries."""

    port: int = DEFAULT_PORT
    node: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int) or self.port < 0:
            raise ValueError(f"invalid port: {self.port!r}")
        if self.node is not None and not isinstance(self.node, Mapping):
            raise ValueError("node details must be a mapping")


def default_config() -> ActionsConfig:
    """Return the default configuration."""
    return ActionsConfig()


def parse_config(data: Union[bytes, str]) -> Optional[ActionsConfig]:
    """Read the ``actions`` section of a YAML document; return None if it is absent."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid configuration: {exc}") from exc

    if document is None:
        return None
    if not isinstance(document, Mapping):
        raise ValueError("configuration must be a mapping")

    section = document.get("actions")
    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise ValueError("actions configuration must be a mapping")

    port = section.get("port")
    node = section.get("node")
    return ActionsConfig(port=0 if port is None else port, node=node)