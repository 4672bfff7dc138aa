"""Application-wide constants for mac-rotator.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "LOG_DIR_NAME",
    # Log file names
    "RECORDS_FILE_NAME",
    "SUMMARY_FILE_NAME",
    "SYSTEM_LOG_FILE_NAME",
    "DEFAULT_HASH_CHAIN_FILE",
    "GENESIS_HASH",
    # Health supervision
    "DEFAULT_HEALTH_WAIT_SECONDS",
    "MIN_HEALTH_WAIT_SECONDS",
    "MAX_HEALTH_WAIT_SECONDS",
    "DEFAULT_MAX_DISABLE_SECONDS",
    "MIN_MAX_DISABLE_SECONDS",
    "MAX_MAX_DISABLE_SECONDS",
    "SETTLE_PAUSE_SECONDS",
    "POLL_INTERVAL_SECONDS",
    # MAC generation
    "MAX_COLLISION_RETRIES",
    # Adapter filtering
    "DEFAULT_EXCLUSIONS",
    # Rollback reasons
    "REASON_BOUNCE_FAIL",
    "REASON_NO_IPV4",
    # Platform commands
    "SUBPROCESS_TIMEOUT_SECONDS",
    "OVERRIDE_REGISTRY_KEYWORD",
    "NET_CLASS_KEY",
    # Scheduling
    "DEFAULT_SCHEDULE_INTERVAL_MINUTES",
    "SCHEDULED_TASK_NAME",
]

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for directory names, logger names, etc.
APP_NAME: str = "mac-rotator"

# Directory created under an external volume's mount point for logs
LOG_DIR_NAME: str = "mac-rotator-logs"

# ============================================================================
# Ledger Files (all relative to the resolved log root)
# ============================================================================

# Machine-readable record stream, one JSON object per line
RECORDS_FILE_NAME: str = "records.jsonl"

# Human-readable summary, one line per attempt
SUMMARY_FILE_NAME: str = "summary.log"

# Operational warnings/errors (not part of the tamper-evident trail)
SYSTEM_LOG_FILE_NAME: str = "system.jsonl"

# Holds the hash of the most recent committed entry
DEFAULT_HASH_CHAIN_FILE: str = "chain.state"

# previousHash of the first entry in a chain
GENESIS_HASH: str = ""

# ============================================================================
# Health Supervision
# ============================================================================

# Polling window for link-up and IPv4 acquisition after a bounce
DEFAULT_HEALTH_WAIT_SECONDS: int = 30
MIN_HEALTH_WAIT_SECONDS: int = 1
MAX_HEALTH_WAIT_SECONDS: int = 600  # 10 minutes

# Bound on how long the disable half of a bounce may take to settle
DEFAULT_MAX_DISABLE_SECONDS: int = 10
MIN_MAX_DISABLE_SECONDS: int = 1
MAX_MAX_DISABLE_SECONDS: int = 120

# Fixed pause between disable and enable
SETTLE_PAUSE_SECONDS: float = 2.0

# Interval between status/IPv4 polls
POLL_INTERVAL_SECONDS: float = 1.0

# ============================================================================
# MAC Generation
# ============================================================================

# Redraws allowed when a generated address equals the adapter's current one.
# Collisions are ~1/2^46 per draw, so exhausting this means a broken RNG.
MAX_COLLISION_RETRIES: int = 8

# ============================================================================
# Adapter Filtering
# ============================================================================

# Matched case-insensitively against "<name> <description>"
DEFAULT_EXCLUSIONS: tuple[str, ...] = (
    "Virtual",
    "VPN",
    "Hyper-V",
    "Loopback",
    "Bluetooth",
)

# ============================================================================
# Rollback Reasons (recorded verbatim in the ledger)
# ============================================================================

REASON_BOUNCE_FAIL: str = "Bounce fail"
REASON_NO_IPV4: str = "No IPv4, rolled back"

# ============================================================================
# Platform Commands
# ============================================================================

# PowerShell cmdlets can be slow on first load; ip/ifconfig are fast
SUBPROCESS_TIMEOUT_SECONDS: int = 60

# Advanced property / registry value name holding the MAC override
OVERRIDE_REGISTRY_KEYWORD: str = "NetworkAddress"

# Device class key for network adapters (Windows)
NET_CLASS_KEY: str = r"SYSTEM\CurrentControlSet\Control\Class\{4d36e972-e325-11ce-bfc1-08002be10318}"

# ============================================================================
# Scheduling
# ============================================================================

DEFAULT_SCHEDULE_INTERVAL_MINUTES: int = 60
SCHEDULED_TASK_NAME: str = "MacRotator"
