"""Internal constants shared across the library."""

LOOPBACK_HOST = "127.0.0.1"
SERVICE_PATH = "/exa.language_server_pb.LanguageServerService"
PROBE_ENDPOINT = f"{SERVICE_PATH}/GetUnleashData"
USER_STATUS_ENDPOINT = f"{SERVICE_PATH}/GetUserStatus"

CONNECT_PROTOCOL_VERSION = "1"
CSRF_HEADER = "X-Codeium-Csrf-Token"

DEFAULT_IDE_NAME = "antigravity"
DEFAULT_PROCESS_PATTERN = "language_server"

# ------------------------------------------------------------------
# Subprocess and network budgets (seconds / bytes)
# ------------------------------------------------------------------

PROCESS_DISCOVERY_TIMEOUT = 8.0
PORT_DISCOVERY_TIMEOUT = 5.0
PROBE_TIMEOUT = 3.0
FETCH_TIMEOUT = 5.0

PROBE_MAX_BYTES = 64 * 1024
FETCH_MAX_BYTES = 1024 * 1024

# ------------------------------------------------------------------
# Validation bounds
# ------------------------------------------------------------------

MAX_PID = 4_194_304
MIN_PORT = 1
MAX_PORT = 65_535
MIN_TOKEN_LENGTH = 6
MAX_TOKEN_LENGTH = 256
MAX_CANDIDATE_PORTS = 32

MAX_SYSTEMS = 200
MAX_LABEL_LENGTH = 128
MAX_SYSTEM_ID_LENGTH = 256
MAX_RESET_TIME_LENGTH = 64

# ------------------------------------------------------------------
# Scheduler and failure governor
# ------------------------------------------------------------------

DEFAULT_SCAN_INTERVAL = 90.0
MIN_SCAN_INTERVAL = 30.0
MAX_SCAN_INTERVAL = 86_400.0

SIGNAL_FULL = 100
SIGNAL_DECAY = 25
CONSECUTIVE_FAILURE_THRESHOLD = 3

# Decimal digits used when grouping fuel levels into quota pools.
POOL_PRECISION = 6
