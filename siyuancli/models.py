"""Configuration and shared data types."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


@dataclass
class AIConfig:
    """Settings for the AI provider."""

    provider: str = ""
    base_url: str = ""
    api_key: str = ""
    model: str = ""
    max_tokens: int = 0
    temperature: float = 0.0
    timeout: int = 0


@dataclass
class LogConfig:
    """Settings for log files."""

    level: str = ""
    max_size: int = field(default=0, metadata={"key": "maxSize"})
    max_backups: int = field(default=0, metadata={"key": "maxBackups"})
    max_age: int = field(default=0, metadata={"key": "maxAge"})
    compress: bool = False


@dataclass
class SiYuanConfig:
    """Connection settings for the SiYuan server."""

    base_url: str = ""
    api_token: str = ""
    timeout: int = 0
    user_agent: str = ""
    retry_count: int = 0
    enabled: bool = False


@dataclass
class OutputConfig:
    """Output settings: ``table`` or ``json``."""

    format: str = ""


@dataclass
class AppConfig:
    """The whole application configuration."""

    version: str = ""
    ai: AIConfig = field(default_factory=AIConfig)
    log: LogConfig = field(default_factory=LogConfig)
    siyuan: SiYuanConfig = field(default_factory=SiYuanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


@dataclass
class Notebook:
    """A notebook as reported by the server."""

    id: str = ""
    name: str = ""
    icon: str = ""
    sort: int = 0
    closed: bool = False


class CommandError(Exception):
    """A command could not complete."""


class APIError(Exception):
    """The server answered with a non-zero code."""

    def __init__(self, code: int, msg: str) -> None:
        super().__init__(f"code={code}, msg={msg}")
        self.code = code
        self.msg = msg


_SECTIONS = {
    "ai": AIConfig,
    "log": LogConfig,
    "siyuan": SiYuanConfig,
    "output": OutputConfig,
}


def _key(f) -> str:
    return f.metadata.get("key", f.name)


def _section_from(cls, data: Any):
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"配置节必须是映射: {data!r}")
    kwargs = {f.name: data[_key(f)] for f in fields(cls) if _key(f) in data}
    return cls(**kwargs)


def config_from_dict(data: dict | None) -> AppConfig:
    """Build an AppConfig from a mapping laid out like the YAML file."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("配置必须是映射")
    sections = {name: _section_from(cls, data.get(name)) for name, cls in _SECTIONS.items()}
    return AppConfig(version=str(data.get("version", "")), **sections)


def config_to_dict(config: AppConfig) -> dict:
    """Return the mapping that the YAML file holds for ``config``."""
    result: dict[str, Any] = {"version": config.version}
    for name in _SECTIONS:
        section = getattr(config, name)
        result[name] = {_key(f): getattr(section, f.name) for f in fields(section)}
    return result