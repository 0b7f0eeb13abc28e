"""
BlockQL Constants

This module consolidates global constants and environment configuration
used throughout the codebase. Values that may be overridden through a
``.env`` file are wrapped so that their defaults stay reachable.
"""
import ast
import re
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

SERVICE_DEFAULTS = {
    'BLOCKQL_SOURCE_URL':              'http://127.0.0.1:8545',
    'BLOCKQL_SERVER_HOST':             '127.0.0.1',
    'BLOCKQL_SERVER_PORT':             '4000',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_TO_FILE':                     'False',
    'LOG_INCLUDE_REQUEST_CONTENT':     'False',
    'LOG_INCLUDE_RESPONSE_CONTENT':    'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_MAX_PATH_LENGTH = 320  # Truncates logged upstream URLs past this length
LOG_BACKUP_COUNT = 5


# ==================================================================================
# SERVICE
# ==================================================================================
SERVICE_VERSION = '0.4.0'


# ==================================================================================
# QUERY LIMITS
# ==================================================================================
# Maximum number of blocks a single multi-block query may select
DEFAULT_QUERY_MAX_SIZE = 100

# Block used when a single-block query names no number, hash or tag
DEFAULT_BLOCK = 'latest'

# Symbolic block tags understood by Ethereum JSON-RPC nodes
BLOCK_TAGS = ('latest', 'earliest', 'pending', 'safe', 'finalized')


# ==================================================================================
# UPSTREAM SOURCE
# ==================================================================================
# Upstream request timeout
CONNECTION_TIMEOUT = 10.0  # 10 seconds


# ==================================================================================
# VALIDATION PATTERNS
# ==================================================================================
# 32-byte block or transaction hash, 0x-prefixed
VALID_HASH_PATTERN = re.compile(r'^0x[0-9a-fA-F]{64}$')


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = SERVICE_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Only known literals reach ast.literal_eval.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
