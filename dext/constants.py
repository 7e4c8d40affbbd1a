"""
Engine defaults and message kinds.

Every tunable here can be overridden from settings.toml (see
utils.helpers.load_settings).
"""

from pathlib import Path

# Ranking
MAX_RESULTS = 10
RELEVANCE_THRESHOLD = 0.25

# Debounce window for query, detail and copy handling (milliseconds)
DEBOUNCE_MS = 100

# XDG locations
CONFIG_DIR = Path.home() / ".config" / "dext"
DATA_DIR = Path.home() / ".local" / "share" / "dext"
SETTINGS_PATH = CONFIG_DIR / "settings.toml"
CACHE_PATH = DATA_DIR / "cache.db"
COMMANDS_PATH = CONFIG_DIR / "commands.toml"

# Suffix for per-plugin item detail cache namespaces
ITEM_DETAILS_SUFFIX = "-item-details"

# Message kinds on the request/response channel
IPC_QUERY_COMMAND = "query-command"
IPC_QUERY_RESULTS = "query-results"
IPC_ITEM_DETAILS_REQUEST = "item-details-request"
IPC_ITEM_DETAILS_RESPONSE = "item-details-response"
IPC_EXECUTE_ITEM = "execute-item"
IPC_COPY_CURRENT_ITEM = "copy-current-item"
