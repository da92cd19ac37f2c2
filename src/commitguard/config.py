from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_serializer, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from commitguard.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_CODE_EXTENSIONS,
    DEFAULT_COMMIT_MESSAGE_FORMAT_REGEX,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_LOG_FILE,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES_PER_COMMIT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
    REPO_CONFIG_FILENAME,
    TEAM_CONFIG_FILENAME,
    HookName,
    is_supported_model,
)
from commitguard.exceptions import ConfigError
from commitguard.logging import get_logger, level_from_name

__all__ = [
    "ReviewConfig",
    "MappingSource",
    "ConfigProvenance",
    "resolve_config",
    "resolve_config_with_provenance",
    "load_config",
    "read_config_sources",
    "read_shell_config",
    "read_team_config",
    "flatten_team_config",
    "split_patterns",
]

logger = get_logger(__name__)

#: Field name -> name of the source that supplied it ("default" if none did)
ConfigProvenance = dict[str, str]

_SHELL_ASSIGNMENT = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$")
_SHELL_DEFAULT_EXPANSION = re.compile(r"^\$\{[A-Za-z_][A-Za-z0-9_]*:?-(?P<default>.*)\}$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def split_patterns(text: str) -> list[str]:
    """Split a regex alternation into its top-level branches.

    Pipes inside groups, character classes, or escaped with a backslash stay
    part of their branch, so ``a|(b|c)|d`` yields ``["a", "(b|c)", "d"]``.

    Args:
        text: Pipe-separated regular expression fragments.

    Returns:
        Non-empty fragments in their original order.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    in_class = False
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\":
            current.append(char)
            escaped = True
            continue
        if in_class:
            in_class = char != "]"
        elif char == "[":
            in_class = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif char == "|" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


class ReviewConfig(BaseSettings):
    """Effective hook configuration, frozen once resolved.

    Field aliases are the environment/config-file names existing deployments
    use (``MAX_FILE_SIZE``, ``CLAUDE_TIMEOUT``...). Instances are built by
    :func:`resolve_config`, which applies the precedence chain explicitly, so
    the model itself only reads the values it is constructed with.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    # File selection
    code_extensions: frozenset[str] = Field(
        default=DEFAULT_CODE_EXTENSIONS, alias="CODE_EXTENSIONS", validate_default=True
    )
    exclude_patterns: tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDE_PATTERNS, alias="EXCLUDE_PATTERNS", validate_default=True
    )
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, ge=0, alias="MAX_FILE_SIZE")
    max_files_per_commit: int = Field(
        default=DEFAULT_MAX_FILES_PER_COMMIT, ge=0, alias="MAX_FILES_PER_COMMIT"
    )

    # External review call
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, alias="CLAUDE_TIMEOUT")
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, alias="CLAUDE_API_RETRIES")
    retry_delay_ms: int = Field(
        default=DEFAULT_RETRY_DELAY_MS, ge=0, alias="CLAUDE_API_RETRY_DELAY"
    )
    model: str = Field(default=DEFAULT_MODEL, alias="CLAUDE_MODEL")
    claude_command: str = Field(default="claude", min_length=1, alias="CLAUDE_COMMAND")

    # Response cache
    cache_enabled: bool = Field(default=True, alias="ENABLE_CACHE")
    cache_ttl: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, ge=0, alias="CACHE_EXPIRY")
    cache_dir: str = Field(default=DEFAULT_CACHE_DIR, min_length=1, alias="CACHE_DIR")

    # Hooks
    pre_commit_enabled: bool = Field(default=True, alias="PRE_COMMIT_ENABLED")
    commit_msg_enabled: bool = Field(default=True, alias="COMMIT_MSG_ENABLED")
    pre_push_enabled: bool = Field(default=True, alias="PRE_PUSH_ENABLED")
    analysis_level: Literal["quick", "moderate", "thorough"] = Field(
        default="moderate", alias="ANALYSIS_LEVEL"
    )
    project_type: str = Field(default="web", alias="PROJECT_TYPE")
    primary_language: str = Field(default="javascript", alias="PRIMARY_LANGUAGE")
    indeterminate_policy: Literal["allow", "warn", "block"] = Field(
        default="allow", alias="INDETERMINATE_POLICY"
    )

    # Commit message checks
    enforce_commit_message_format: bool = Field(
        default=True, alias="ENFORCE_COMMIT_MESSAGE_FORMAT"
    )
    commit_message_format_regex: str = Field(
        default=DEFAULT_COMMIT_MESSAGE_FORMAT_REGEX, alias="COMMIT_MESSAGE_FORMAT_REGEX"
    )
    commit_message_max_length: int = Field(
        default=72, gt=0, alias="COMMIT_MESSAGE_MAX_LENGTH"
    )
    commit_message_min_length: int = Field(
        default=10, ge=0, alias="COMMIT_MESSAGE_MIN_LENGTH"
    )

    # Logging
    debug: bool = Field(default=False, alias="CLAUDE_HOOKS_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default=DEFAULT_LOG_FILE, alias="LOG_FILE")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Only honour constructor values.

        The environment, repo file and team file are layered by
        :func:`resolve_config`; reading ``os.environ`` here as well would make
        resolution depend on ambient process state.
        """
        return (init_settings,)

    @field_validator("code_extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: Any) -> Any:
        """Accept ``"js|ts"``, ``"js, .ts"`` or a list; normalize to lower case."""
        if isinstance(v, str):
            v = re.split(r"[|,\s]+", v)
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(
                str(item).strip().lstrip(".").lower() for item in v if str(item).strip()
            )
        return v

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def parse_patterns(cls, v: Any) -> Any:
        """Split a pipe-separated string; lists are taken as-is."""
        if isinstance(v, str):
            return tuple(split_patterns(v))
        if isinstance(v, (list, tuple)):
            return tuple(str(item) for item in v if str(item))
        return v

    @field_validator("exclude_patterns", mode="after")
    @classmethod
    def validate_regex_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate that all patterns are valid regex."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid regex pattern '{pattern}': {e}") from e
        return v

    @field_validator("commit_message_format_regex", mode="after")
    @classmethod
    def validate_format_regex(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern '{v}': {e}") from e
        return v

    @field_validator("model", mode="after")
    @classmethod
    def validate_model(cls, v: str) -> str:
        v = v.strip()
        if not is_supported_model(v):
            raise ValueError(f"Unsupported model '{v}' (use sonnet, opus, haiku or claude-*)")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if level_from_name(v, default=-1) == -1:
            raise ValueError(f"Unknown log level '{v}'")
        return v.strip().upper()

    @field_serializer("code_extensions")
    def serialize_extensions(self, v: frozenset[str]) -> list[str]:
        return sorted(v)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000

    def hook_enabled(self, hook: HookName) -> bool:
        """Whether the named hook should run at all."""
        return {
            "pre-commit": self.pre_commit_enabled,
            "commit-msg": self.commit_msg_enabled,
            "pre-push": self.pre_push_enabled,
        }[hook]


class MappingSource(PydanticBaseSettingsSource):
    """Settings source backed by a flat ``{ENV_NAME: raw value}`` mapping.

    The mapping is copied on construction, so later changes to the caller's
    dict cannot leak into a resolved configuration.

    Attributes:
        label: Human-readable name used in provenance and error messages.
        skip_empty: Treat blank strings as absent (shell semantics).
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        values: Mapping[str, Any] | None,
        label: str,
        *,
        skip_empty: bool = False,
    ) -> None:
        super().__init__(settings_cls)
        self.label = label
        self.skip_empty = skip_empty
        self._values: dict[str, Any] = dict(values or {})

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get the raw value for ``field_name`` keyed by its alias."""
        key = field.alias or field_name
        value = self._values.get(key)
        if value is None:
            return None, key, False
        if self.skip_empty and isinstance(value, str) and not value.strip():
            return None, key, False
        if isinstance(value, str):
            value = value.strip()
        return value, key, False

    def __call__(self) -> dict[str, Any]:
        """Return every known setting this source supplies."""
        data: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data


def _resolve(
    sources: tuple[MappingSource, ...],
) -> tuple[ReviewConfig, ConfigProvenance]:
    values: dict[str, Any] = {}
    provenance: ConfigProvenance = {}
    label_by_key: dict[str, str] = {}

    for field_name, field in ReviewConfig.model_fields.items():
        provenance[field_name] = "default"
        for source in sources:
            value, key, _ = source.get_field_value(field, field_name)
            if value is not None:
                values[key] = value
                provenance[field_name] = source.label
                label_by_key[key] = source.label
                break

    try:
        config = ReviewConfig(**values)
    except ValidationError as e:
        first_error = e.errors()[0]
        key = str(first_error["loc"][0]) if first_error["loc"] else None
        origin = label_by_key.get(key or "", "default")
        raise ConfigError(
            message=f"Invalid value for {key} from {origin}: {first_error['msg']}",
            field=key,
            value=values.get(key or "", first_error.get("input")),
        ) from e

    return config, provenance


def resolve_config_with_provenance(
    environ: Mapping[str, str] | None,
    repo_values: Mapping[str, Any] | None,
    team_values: Mapping[str, Any] | None,
) -> tuple[ReviewConfig, ConfigProvenance]:
    """Resolve configuration and report which source supplied each field.

    Args:
        environ: Environment snapshot (highest priority).
        repo_values: Values from the per-repository shell config.
        team_values: Flattened values from the team YAML file.

    Returns:
        Tuple of (config, provenance).

    Raises:
        ConfigError: If any supplied value is malformed for its field.
    """
    sources = (
        MappingSource(ReviewConfig, environ, "environment", skip_empty=True),
        MappingSource(ReviewConfig, repo_values, "repo config", skip_empty=True),
        MappingSource(ReviewConfig, team_values, "team config"),
    )
    return _resolve(sources)


def resolve_config(
    environ: Mapping[str, str] | None,
    repo_values: Mapping[str, Any] | None = None,
    team_values: Mapping[str, Any] | None = None,
) -> ReviewConfig:
    """Merge the configuration sources into one frozen ReviewConfig.

    Precedence, per field (highest first):
    1. Environment variable, when present and non-empty
    2. Per-repository shell config (``.claude-hooks-config.sh``)
    3. Team config (``.claude-hooks-team.yml``)
    4. Built-in default

    A malformed value is an error for that field; there is no fallback to a
    lower-priority source. Unknown keys in any source are ignored.

    Args:
        environ: Environment snapshot, e.g. ``dict(os.environ)``.
        repo_values: Flat mapping parsed from the repo shell config.
        team_values: Flat mapping derived from the team YAML file.

    Returns:
        Resolved configuration.

    Raises:
        ConfigError: If any supplied value is malformed for its field.
    """
    config, _ = resolve_config_with_provenance(environ, repo_values, team_values)
    return config


# =============================================================================
# File Readers
# =============================================================================


def _parse_shell_value(raw: str) -> str | None:
    value = raw.strip()
    if value and value[0] not in {'"', "'"} and " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    value = _unquote(value)
    expansion = _SHELL_DEFAULT_EXPANSION.match(value)
    if expansion:
        value = _unquote(expansion.group("default").strip())
    if "$(" in value or "`" in value or value.startswith("$"):
        return None
    return value


def read_shell_config(path: Path) -> dict[str, str]:
    """Read ``KEY=value`` assignments from a shell-sourced config file.

    Understands ``export KEY=value``, quoted values, trailing comments and the
    ``${KEY:-default}`` idiom (which yields ``default``; the environment is
    layered on top separately). Command substitutions, bare variable
    references and non-assignment lines are skipped.

    Args:
        path: Config file; a missing file yields an empty mapping.

    Returns:
        Mapping of key to raw string value.

    Raises:
        ConfigError: If the file exists but cannot be read.
    """
    config: dict[str, str] = {}
    if not path.is_file():
        return config
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        match = _SHELL_ASSIGNMENT.match(line)
        if not match:
            continue
        value = _parse_shell_value(match.group("value"))
        if value is None:
            logger.debug("shell_config_value_skipped", key=match.group("key"), path=str(path))
            continue
        config[match.group("key")] = value
    return config


_TEAM_PATHS: dict[tuple[str, ...], str] = {
    ("file_filters", "include_extensions"): "CODE_EXTENSIONS",
    ("file_filters", "exclude_patterns"): "EXCLUDE_PATTERNS",
    ("file_filters", "max_file_size"): "MAX_FILE_SIZE",
    ("file_filters", "max_files_per_commit"): "MAX_FILES_PER_COMMIT",
    ("api", "default_model"): "CLAUDE_MODEL",
    ("api", "retries", "max_retries"): "CLAUDE_API_RETRIES",
    ("api", "retries", "retry_delay"): "CLAUDE_API_RETRY_DELAY",
    ("api", "cache", "enabled"): "ENABLE_CACHE",
    ("api", "cache", "ttl"): "CACHE_EXPIRY",
    ("analysis", "default_level"): "ANALYSIS_LEVEL",
    ("project", "type"): "PROJECT_TYPE",
    ("project", "primary_language"): "PRIMARY_LANGUAGE",
}

_HOOK_ENABLED_KEYS: dict[str, str] = {
    "pre-commit": "PRE_COMMIT_ENABLED",
    "commit-msg": "COMMIT_MSG_ENABLED",
    "pre-push": "PRE_PUSH_ENABLED",
}


def _dig(data: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = data
    for part in path:
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def _hook_entry(section: Any, hook: str) -> Any:
    if not isinstance(section, Mapping):
        return None
    if hook in section:
        return section[hook]
    return section.get(hook.replace("-", "_"))


def flatten_team_config(
    data: Mapping[str, Any], hook: HookName | None = None
) -> dict[str, Any]:
    """Map the structured team YAML layout onto flat setting names.

    Top-level keys that already are setting names (``MAX_FILE_SIZE: 5000``)
    are kept as-is and win over the structured layout. ``api.timeout`` may be
    a number or a per-hook mapping (``pre_commit``, ``commit_msg``,
    ``pre_push``); the entry for ``hook`` is used.

    Args:
        data: Parsed YAML document.
        hook: Hook being configured, for per-hook values.

    Returns:
        Flat mapping of setting name to raw value.
    """
    flat: dict[str, Any] = {}
    for path, key in _TEAM_PATHS.items():
        value = _dig(data, path)
        if value is not None:
            flat[key] = value

    timeout = _dig(data, ("api", "timeout"))
    if isinstance(timeout, Mapping):
        if hook is not None:
            per_hook = _hook_entry(timeout, hook)
            if per_hook is not None:
                flat["CLAUDE_TIMEOUT"] = per_hook
    elif timeout is not None:
        flat["CLAUDE_TIMEOUT"] = timeout

    hooks_section = data.get("hooks")
    for hook_name, key in _HOOK_ENABLED_KEYS.items():
        entry = _hook_entry(hooks_section, hook_name)
        if isinstance(entry, Mapping) and entry.get("enabled") is not None:
            flat[key] = entry["enabled"]

    known = {field.alias for field in ReviewConfig.model_fields.values()}
    for key, value in data.items():
        if key in known and value is not None:
            flat[key] = value
    return flat


def read_team_config(path: Path, hook: HookName | None = None) -> dict[str, Any]:
    """Load and flatten the team YAML file.

    Args:
        path: Team config file; a missing file yields an empty mapping.
        hook: Hook being configured, for per-hook values.

    Returns:
        Flat mapping of setting name to raw value.

    Raises:
        ConfigError: If the YAML is invalid or its root is not a mapping.
    """
    if not path.is_file():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            message=f"Invalid YAML in {path}: {e}",
            field=None,
            value=None,
        ) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if loaded is None:
        logger.warning("team_config_empty", path=str(path))
        return {}
    if not isinstance(loaded, Mapping):
        raise ConfigError(
            f"Team config {path} must be a mapping, got {type(loaded).__name__}"
        )
    return flatten_team_config(loaded, hook)


def read_config_sources(
    repo_root: Path, hook: HookName | None = None
) -> tuple[dict[str, str], dict[str, Any]]:
    """Read the repo shell config and the team YAML file under ``repo_root``.

    Returns:
        Tuple of (repo_values, team_values).
    """
    repo_values = read_shell_config(repo_root / REPO_CONFIG_FILENAME)
    team_values = read_team_config(repo_root / TEAM_CONFIG_FILENAME, hook)
    if not repo_values and not team_values:
        logger.debug("no_config_files_found", repo_root=str(repo_root))
    return repo_values, team_values


def load_config(
    repo_root: Path,
    environ: Mapping[str, str] | None = None,
    hook: HookName | None = None,
) -> ReviewConfig:
    """Load configuration for a hook run in ``repo_root``.

    Args:
        repo_root: Repository top-level directory holding the config files.
        environ: Environment snapshot; defaults to a copy of ``os.environ``.
        hook: Hook being configured, for per-hook team values.

    Returns:
        Resolved configuration.

    Raises:
        ConfigError: If a file is unreadable or any value is malformed.
    """
    if environ is None:
        environ = dict(os.environ)
    repo_values, team_values = read_config_sources(repo_root, hook)
    return resolve_config(environ, repo_values, team_values)
