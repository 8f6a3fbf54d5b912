"""
Stealth Configuration

Wire-contract constants (không được thay đổi, client khác ngôn ngữ
phải tái tạo byte-identical keys) và runtime settings từ environment.
"""

import os

# ============== Wire contract ==============

VIEW_DOMAIN = b"stealth:view"
SPEND_DOMAIN = b"stealth:spend"

META_ADDRESS_PREFIX = "st"
META_ADDRESS_SEPARATOR = ":"

MEMO_TAG = "stealth:"
MEMO_JSON_FIELD = "ephemeralPubKey"

KEY_LENGTH = 32
MIN_SEED_LENGTH = 32
MAX_OUTPUT_INDEX = 255

# Message cố định để wallet ký; cùng wallet + cùng message = cùng keys
SIGNATURE_MESSAGE = (
    "Offuscate Privacy Identity\n\n"
    "Sign this message to derive your stealth keys.\n"
    "This signature is used locally and never sent to any server.\n\n"
    "Domain: offuscate.app"
)

# ============== Runtime settings ==============

DEFAULT_SCAN_WORKERS = 4
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 5000


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


class Settings:
    """
    Runtime settings

    Attributes:
        scan_workers: số worker tối đa cho batch scan
        log_level: logging level name
        api_host, api_port, api_debug: cấu hình Flask backend
    """

    def __init__(self, scan_workers=DEFAULT_SCAN_WORKERS, log_level=DEFAULT_LOG_LEVEL,
                 api_host=DEFAULT_API_HOST, api_port=DEFAULT_API_PORT, api_debug=False):
        if scan_workers < 1:
            raise ValueError("scan_workers must be >= 1")

        self.scan_workers = scan_workers
        self.log_level = log_level.upper()
        self.api_host = api_host
        self.api_port = api_port
        self.api_debug = api_debug

    def __repr__(self):
        return (f"Settings(scan_workers={self.scan_workers}, log_level={self.log_level!r}, "
                f"api_host={self.api_host!r}, api_port={self.api_port}, api_debug={self.api_debug})")


def load_settings():
    """Đọc Settings từ environment variables"""
    return Settings(
        scan_workers=_env_int("STEALTH_SCAN_WORKERS", DEFAULT_SCAN_WORKERS),
        log_level=os.environ.get("STEALTH_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        api_host=os.environ.get("STEALTH_API_HOST", DEFAULT_API_HOST),
        api_port=_env_int("STEALTH_API_PORT", DEFAULT_API_PORT),
        api_debug=_env_bool("STEALTH_API_DEBUG"),
    )
