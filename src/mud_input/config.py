"""Configuration loading with a minimal YAML parser.

Config files live in ~/.mud-input/configs/, ./configs/ or the bundled
mud_input.configs package. The parser handles the subset these files use
(no external dependencies):
- Scalars (strings, numbers, booleans, null)
- Nested mappings by indentation
- Lists (- item syntax)
- Comments (# ...) and quoted strings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib.resources import as_file, files
from pathlib import Path

logger = logging.getLogger(__name__)

# --- Minimal YAML Parser ---


def parse_simple_yaml(text: str) -> dict:
    """Parse a simple YAML document into a Python dict."""
    lines = []
    for raw in text.split("\n"):
        stripped = _strip_comment(raw).rstrip()
        if stripped.strip():
            lines.append((len(stripped) - len(stripped.lstrip()), stripped.strip()))
    result, _ = _parse_block(lines, 0, 0)
    return result if isinstance(result, dict) else {}


def _parse_block(lines: list[tuple[int, str]], i: int, indent: int) -> tuple[dict | list, int]:
    """Parse lines at exactly `indent` starting at index `i`."""
    result: dict | list | None = None
    while i < len(lines):
        line_indent, content = lines[i]
        if line_indent < indent:
            break
        if line_indent > indent:
            # Stray deeper line with no owning key
            i += 1
            continue

        if content == "-" or content.startswith("- "):
            if result is None:
                result = []
            if not isinstance(result, list):
                break
            result.append(_parse_value(content[1:]))
            i += 1
            continue

        colon = _find_unquoted_colon(content)
        if colon <= 0:
            i += 1
            continue
        if result is None:
            result = {}
        if not isinstance(result, dict):
            break
        key = content[:colon].strip()
        value = content[colon + 1 :].strip()
        i += 1
        if value:
            result[key] = _parse_value(value)
        elif i < len(lines) and lines[i][0] > indent:
            result[key], i = _parse_block(lines, i, lines[i][0])
        else:
            result[key] = None
    return (result if result is not None else {}), i


def _find_unquoted_colon(s: str) -> int:
    """Position of the first key separator colon not inside quotes."""
    quote = None
    for i, c in enumerate(s):
        if quote:
            if c == quote:
                quote = None
        elif c in "'\"":
            quote = c
        elif c == ":" and (i + 1 == len(s) or s[i + 1] == " "):
            return i
    return -1


def _strip_comment(line: str) -> str:
    """Remove a # comment that starts the line or follows a space."""
    quote = None
    for i, c in enumerate(line):
        if quote:
            if c == quote:
                quote = None
        elif c in "'\"":
            quote = c
        elif c == "#" and (i == 0 or line[i - 1] in " \t"):
            return line[:i]
    return line


def _parse_value(s: str) -> str | int | float | bool | None:
    """Parse a scalar YAML value."""
    s = s.strip()
    if not s or s.lower() in ("null", "~", "none"):
        return None
    if s.lower() in ("true", "yes", "on"):
        return True
    if s.lower() in ("false", "no", "off"):
        return False
    if len(s) >= 2 and s[0] == s[-1] and s[0] in "'\"":
        inner = s[1:-1]
        if s[0] == '"':
            return inner.replace('\\"', '"').replace("\\n", "\n").replace("\\t", "\t")
        return inner.replace("''", "'")
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        return s


# --- Configuration Dataclasses ---


@dataclass
class HistoryConfig:
    """Command history persistence."""

    enabled: bool = True
    directory: str = "~/.mud-input/characters"
    hydrate_limit: int = 1000
    search_limit: int = 50

    def database_path(self, character_id: str) -> Path:
        return Path(self.directory).expanduser() / character_id / "history.db"


@dataclass
class CompletionConfig:
    """Tab completion behaviour and always-available words."""

    min_preview_length: int = 2
    max_preview: int = 10
    words: list[str] = field(
        default_factory=lambda: [
            "look", "north", "south", "east", "west", "up", "down",
            "inventory", "equipment", "score",
        ]
    )


@dataclass
class Config:
    """Complete application configuration."""

    history: HistoryConfig = field(default_factory=HistoryConfig)
    completion: CompletionConfig = field(default_factory=CompletionConfig)


# --- Config Loading ---


def _get_user_data_dir() -> Path:
    """Get the user's mud-input data directory ($HOME/.mud-input)."""
    return Path.home() / ".mud-input"


def _looks_like_path(name: str) -> bool:
    return "/" in name or "\\" in name or name.endswith(".yml")


def _find_config_file(config_name_or_path: str) -> Path | None:
    """Find a config file by name or path.

    Search order for a name:
    1. $HOME/.mud-input/configs/<name>.yml
    2. Current working directory configs/<name>.yml
    3. Bundled mud_input.configs/<name>.yml
    """
    if _looks_like_path(config_name_or_path):
        path = Path(config_name_or_path).expanduser()
        return path if path.is_file() else None

    config_filename = f"{config_name_or_path}.yml"
    for candidate in (
        _get_user_data_dir() / "configs" / config_filename,
        Path.cwd() / "configs" / config_filename,
    ):
        if candidate.is_file():
            return candidate

    try:
        config_ref = files("mud_input.configs").joinpath(config_filename)
        with as_file(config_ref) as p:
            if p.is_file():
                return Path(p)
    except (ModuleNotFoundError, FileNotFoundError, TypeError):
        pass

    return None


def _get_config_search_paths(config_name: str) -> list[str]:
    config_filename = f"{config_name}.yml"
    return [
        str(_get_user_data_dir() / "configs" / config_filename),
        str(Path.cwd() / "configs" / config_filename),
        f"mud_input.configs/{config_filename} (bundled)",
    ]


def load_config(config_name_or_path: str | None = None) -> Config:
    """Load configuration from a YAML file.

    Args:
        config_name_or_path: Name of config file (without .yml extension),
                            or path to a config file. Defaults to 'default'.

    Returns:
        Config object with loaded values merged over defaults.

    Raises:
        FileNotFoundError: If a non-default config is specified but not found.
    """
    if not config_name_or_path:
        config_name_or_path = "default"

    config = Config()
    config_path = _find_config_file(config_name_or_path)

    if config_path is None:
        if config_name_or_path == "default":
            return config
        if _looks_like_path(config_name_or_path):
            raise FileNotFoundError(f"Config file not found: {config_name_or_path}")
        paths_str = "\n  - ".join(_get_config_search_paths(config_name_or_path))
        raise FileNotFoundError(
            f"Config '{config_name_or_path}' not found. Searched:\n  - {paths_str}"
        )

    logger.debug("Loading config from %s", config_path)
    with open(config_path, encoding="utf-8") as f:
        _merge_config(config, parse_simple_yaml(f.read()))
    return config


def _merge_config(config: Config, data: dict):
    """Merge parsed YAML data into a Config object."""
    if not isinstance(data, dict):
        return

    if isinstance(data.get("history"), dict):
        h = data["history"]
        if "enabled" in h:
            config.history.enabled = bool(h["enabled"])
        if h.get("directory"):
            config.history.directory = str(h["directory"])
        if "hydrate_limit" in h:
            config.history.hydrate_limit = int(h["hydrate_limit"])
        if "search_limit" in h:
            config.history.search_limit = int(h["search_limit"])

    if isinstance(data.get("completion"), dict):
        c = data["completion"]
        if "min_preview_length" in c:
            config.completion.min_preview_length = int(c["min_preview_length"])
        if "max_preview" in c:
            config.completion.max_preview = int(c["max_preview"])
        if isinstance(c.get("words"), list):
            config.completion.words = [str(w) for w in c["words"] if w is not None]


def get_default_config() -> Config:
    """Return a Config with all default values."""
    return Config()
