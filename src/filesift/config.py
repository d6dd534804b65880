"""Configuration system for filesift.

This module handles loading settings from an INI file and environment
variables, providing defaults from the constants package and validating types
and ranges before any component sees them.
"""

from configparser import ConfigParser
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
import os

from filesift import constants


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


CHUNK_STRATEGIES = ("lines", "tokens", "smart")

# Schema: section -> key -> (type, default, min, max, description)
CONFIG_SCHEMA: dict[str, dict[str, tuple[type, Any, Any, Any, str]]] = {
    "agent": {
        "token_limit": (int, constants.TOKEN_LIMIT, 1, None, "Max tokens forwarded per request"),
        "concurrent_files": (int, constants.CONCURRENT_FILES, 1, 64, "Concurrent backend calls"),
        "max_file_size_kb": (int, constants.MAX_FILE_SIZE_BYTES // 1024, 1, None, "Read limit"),
    },
    "classify": {
        "small_file_kb": (int, constants.SMALL_FILE_SIZE_BYTES // 1024, 1, None, "Small tier"),
        "medium_file_kb": (int, constants.MEDIUM_FILE_SIZE_BYTES // 1024, 1, None, "Medium tier"),
        "sniff_bytes": (int, constants.SNIFF_BYTES, 64, 8192, "Bytes read for content sniffing"),
        "text_ratio": (float, constants.TEXT_RATIO, 0.0, 1.0, "Printable ratio for text"),
    },
    "chunking": {
        "strategy": (str, constants.CHUNK_STRATEGY, None, None, "lines, tokens or smart"),
        "chunk_size": (int, constants.CHUNK_SIZE, 1, None, "Chunk size (lines or tokens)"),
        "overlap": (int, constants.CHUNK_OVERLAP, 0, None, "Overlap between chunks"),
    },
    "security": {
        "detect_secrets": (bool, True, None, None, "Scan content for secrets and PII"),
        "follow_symlinks": (bool, False, None, None, "Follow symlinks while walking"),
        "max_depth": (int, constants.MAX_DEPTH, 1, None, "Directory walk depth limit"),
    },
    "llm": {
        "provider": (str, constants.DEFAULT_PROVIDER, None, None, "LLM provider"),
        "model": (str, constants.DEFAULT_MODEL, None, None, "Model name"),
        "endpoint": (str, constants.DEFAULT_ENDPOINT, None, None, "Endpoint (Ollama)"),
        "temperature": (float, constants.DEFAULT_TEMPERATURE, 0.0, 2.0, "Sampling temperature"),
        "max_tokens": (int, constants.MAX_TOKENS, 256, 32768, "Max response tokens"),
        "timeout": (int, constants.REQUEST_TIMEOUT, 1, 3600, "Per-request timeout (seconds)"),
    },
    "paths": {
        "ignore_file": (str, constants.IGNORE_FILE, None, None, "Ignore file name"),
    },
}


@dataclass(frozen=True)
class AgentConfig:
    """Budget and concurrency configuration."""

    token_limit: int
    concurrent_files: int
    max_file_size_kb: int

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_kb * 1024


@dataclass(frozen=True)
class ClassifyConfig:
    """Size tier thresholds and content sniffing."""

    small_file_kb: int
    medium_file_kb: int
    sniff_bytes: int
    text_ratio: float

    @property
    def small_file_bytes(self) -> int:
        return self.small_file_kb * 1024

    @property
    def medium_file_bytes(self) -> int:
        return self.medium_file_kb * 1024


@dataclass(frozen=True)
class ChunkingConfig:
    """Chunking configuration."""

    strategy: str
    chunk_size: int
    overlap: int


@dataclass(frozen=True)
class SecurityConfig:
    """Secret detection and walk safety configuration."""

    detect_secrets: bool
    follow_symlinks: bool
    max_depth: int


@dataclass(frozen=True)
class LLMConfig:
    """LLM backend configuration."""

    provider: str
    model: str
    endpoint: str
    temperature: float
    max_tokens: int
    timeout: int


@dataclass(frozen=True)
class PathsConfig:
    """Path names configuration."""

    ignore_file: str


def _load_section(
    parser: ConfigParser, section: str, schema: dict[str, tuple[type, Any, Any, Any, str]]
) -> dict[str, Any]:
    """Load and validate a configuration section.

    Args:
        parser: ConfigParser instance with loaded config
        section: Section name to load
        schema: Schema definition for the section

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If validation fails
    """
    result = {}

    for key, (typ, default, min_val, max_val, _) in schema.items():
        if parser.has_option(section, key):
            raw_value = parser.get(section, key)
            value: bool | int | float | str
            try:
                if typ is bool:
                    value = raw_value.lower() in ("true", "1", "yes", "on")
                elif typ is int:
                    value = int(raw_value)
                elif typ is float:
                    value = float(raw_value)
                else:
                    value = raw_value.strip()
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for [{section}].{key}: {raw_value!r} (expected {typ.__name__})"
                ) from e
        else:
            value = default

        if typ in (int, float) and value is not None:
            if min_val is not None and value < min_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but minimum is {min_val}"
                )
            if max_val is not None and value > max_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but maximum is {max_val}"
                )

        result[key] = value

    return result


def _defaults(section: str) -> dict[str, Any]:
    return {key: default for key, (_, default, _, _, _) in CONFIG_SCHEMA[section].items()}


def _validate(config: "Config") -> None:
    """Cross-field checks the per-key schema cannot express."""
    if config.chunking.strategy.lower() not in CHUNK_STRATEGIES:
        raise ConfigError(
            f"Invalid value for [chunking].strategy: {config.chunking.strategy!r} "
            f"(expected one of {', '.join(CHUNK_STRATEGIES)})"
        )
    if config.classify.medium_file_kb < config.classify.small_file_kb:
        raise ConfigError(
            "Value for [classify].medium_file_kb must not be below [classify].small_file_kb"
        )
    if not config.llm.model:
        raise ConfigError("Value for [llm].model must not be empty")


@dataclass(frozen=True)
class Config:
    """Complete application configuration."""

    agent: AgentConfig = None  # type: ignore[assignment]
    classify: ClassifyConfig = None  # type: ignore[assignment]
    chunking: ChunkingConfig = None  # type: ignore[assignment]
    security: SecurityConfig = None  # type: ignore[assignment]
    llm: LLMConfig = None  # type: ignore[assignment]
    paths: PathsConfig = None  # type: ignore[assignment]
    api_key: Optional[str] = None

    def __post_init__(self):
        """Fill any missing section with schema defaults."""
        # frozen=True, so object.__setattr__ is required
        sections = {
            "agent": AgentConfig,
            "classify": ClassifyConfig,
            "chunking": ChunkingConfig,
            "security": SecurityConfig,
            "llm": LLMConfig,
            "paths": PathsConfig,
        }
        for name, section_cls in sections.items():
            if getattr(self, name) is None:
                object.__setattr__(self, name, section_cls(**_defaults(name)))


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from an INI file.

    Args:
        config_path: Path to config file. If None or missing, uses defaults from schema.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If validation fails.
    """
    parser = ConfigParser()

    if config_path and config_path.exists():
        parser.read(config_path)

    config = Config(
        agent=AgentConfig(**_load_section(parser, "agent", CONFIG_SCHEMA["agent"])),
        classify=ClassifyConfig(**_load_section(parser, "classify", CONFIG_SCHEMA["classify"])),
        chunking=ChunkingConfig(**_load_section(parser, "chunking", CONFIG_SCHEMA["chunking"])),
        security=SecurityConfig(**_load_section(parser, "security", CONFIG_SCHEMA["security"])),
        llm=LLMConfig(**_load_section(parser, "llm", CONFIG_SCHEMA["llm"])),
        paths=PathsConfig(**_load_section(parser, "paths", CONFIG_SCHEMA["paths"])),
    )
    _validate(config)
    return config


def _env_int(name: str, current: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return current
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r} (expected int)") from e
    if value < 1:
        raise ConfigError(f"Value for {name} is {value}, but minimum is 1")
    return value


@lru_cache(maxsize=1)
def load_settings() -> Config:
    """Load settings from the config file and environment variables.

    Settings are cached for the lifetime of the process.
    Use load_settings.cache_clear() to reload settings.

    Returns:
        Config object with environment overrides applied.

    Raises:
        ConfigError: If the file or an override is invalid.
    """
    config_file = Path(os.getenv("FILESIFT_CONFIG", "filesift.ini"))
    try:
        config_exists = config_file.exists()
    except PermissionError:
        config_exists = False
    base = load_config(config_file if config_exists else None)

    agent = AgentConfig(
        token_limit=_env_int("TOKEN_LIMIT", base.agent.token_limit),
        concurrent_files=_env_int("CONCURRENT_FILES", base.agent.concurrent_files),
        max_file_size_kb=base.agent.max_file_size_kb,
    )
    llm = LLMConfig(
        provider=os.getenv("ACTIVE_PROVIDER") or base.llm.provider,
        model=os.getenv("ACTIVE_MODEL") or base.llm.model,
        endpoint=os.getenv("OLLAMA_ENDPOINT") or base.llm.endpoint,
        temperature=base.llm.temperature,
        max_tokens=base.llm.max_tokens,
        timeout=base.llm.timeout,
    )

    return Config(
        agent=agent,
        classify=base.classify,
        chunking=base.chunking,
        security=base.security,
        llm=llm,
        paths=base.paths,
        api_key=os.getenv("LLM_API_KEY"),
    )
