import os

from dotenv import find_dotenv, load_dotenv

from cashflow_dashboard.domain.colors import DEFAULT_CATEGORY_COLORS, DEFAULT_UNCATEGORIZED_COLOR
from cashflow_dashboard.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "DATA_DIR",
    "FAMILY_DATA_FILE",
    "DEFAULT_CURRENCY",
    "CATEGORY_COLORS",
    "UNCATEGORIZED_COLOR",
    "GITHUB_REPO",
    "GITHUB_API_URL",
    "GITHUB_TOKEN",
    "GITHUB_TIMEOUT",
    "HOST",
    "PORT",
)


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    cwd = os.getcwd()
    candidate = os.path.join(cwd, "config", CONFIG_FILENAME)
    if os.path.exists(candidate):
        return candidate
    return os.path.join(cwd, CONFIG_FILENAME)


def _strip_inline_comment(raw_value: str) -> str:
    in_single = False
    in_double = False
    for index, char in enumerate(raw_value):
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        elif char == "#" and not in_single and not in_double:
            return raw_value[:index].rstrip()
    return raw_value


def _unquote_value(raw_value: str) -> str:
    if len(raw_value) >= 2 and raw_value[0] == raw_value[-1] and raw_value[0] in {'"', "'"}:
        return raw_value[1:-1]
    return raw_value


def read_config_file(path: str | None) -> dict[str, str]:
    """Read flat ``KEY: value`` lines; nested YAML is not supported."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            if not key:
                continue
            value = _unquote_value(_strip_inline_comment(raw_value).strip())
            if value:
                values[key] = value
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def ensure_dir(path: str | None) -> None:
    if path and path not in {".", "./"}:
        os.makedirs(path, exist_ok=True)


def ensure_dirs(*paths: str | None) -> None:
    for path in paths:
        ensure_dir(path)


def parse_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    items: list[str] = []
    seen = set()
    for part in raw.split(","):
        item = part.strip()
        if item and item not in seen:
            items.append(item)
            seen.add(item)
    return items


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_float(name: str, default: float = 0.0) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default


def get_env_list(name: str, default: list[str] | tuple[str, ...] = ()) -> list[str]:
    values = parse_list(os.getenv(name))
    return values if values else list(default)


_SENSITIVE_ENV_KEYS = (
    "KEY",
    "TOKEN",
    "SECRET",
    "PASSWORD",
    "AUTH",
)

_ENV_KEYS_TO_LOG = _CONFIG_KEYS + ("CONFIG_DIR",)


def _should_mask_env_value(name: str, value: str) -> bool:
    upper_name = name.upper()
    if any(marker in upper_name for marker in _SENSITIVE_ENV_KEYS):
        return True
    if value.startswith(("ghp_", "github_pat_", "gho_")):
        return True
    if value.lower().startswith("bearer "):
        return True
    return False


def _mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    if not _should_mask_env_value(name, sanitized):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in _ENV_KEYS_TO_LOG:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else _mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


DEFAULT_FAMILY_DATA_FILE = "family.json"
DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_GITHUB_REPO = "we-promise/sure"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_TIMEOUT = 10.0
DEFAULT_PORT = 8000


load_environment()

DATA_DIR = os.getenv("DATA_DIR", ".")
LOG_DIR = os.getenv("LOG_DIR")
CONFIG_DIR = os.getenv("CONFIG_DIR")

ensure_dirs(DATA_DIR, LOG_DIR, CONFIG_DIR)

FAMILY_DATA_PATH = os.path.join(DATA_DIR, os.getenv("FAMILY_DATA_FILE", DEFAULT_FAMILY_DATA_FILE))
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", DEFAULT_CURRENCY_CODE).upper()

GITHUB_REPO = os.getenv("GITHUB_REPO", DEFAULT_GITHUB_REPO)
GITHUB_API_URL = os.getenv("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or None
GITHUB_TIMEOUT = get_env_float("GITHUB_TIMEOUT", DEFAULT_GITHUB_TIMEOUT)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = get_env_int("PORT", DEFAULT_PORT, min_value=1)

CATEGORY_COLORS = get_env_list("CATEGORY_COLORS", DEFAULT_CATEGORY_COLORS)
UNCATEGORIZED_COLOR = os.getenv("UNCATEGORIZED_COLOR", DEFAULT_UNCATEGORIZED_COLOR)
