"""
Security Constants

Centralized constants for security module.
"""

# Maximum lengths for user inputs
MAX_URL_LENGTH = 2048
MAX_TITLE_LENGTH = 500
MAX_CLIP_NAME_LENGTH = 200
MAX_CLIPS_PER_REQUEST = 50

# Generated clip files always carry this prefix
CLIP_NAME_PREFIX = "clip_"
CLIP_EXTENSION = ".mp4"

# Rate limiting defaults
DEFAULT_RATE_LIMIT = 10  # requests per window
DEFAULT_RATE_WINDOW = 60 * 60  # seconds

# Reverse proxies in front of the service that append to X-Forwarded-For.
# Zero means the header is ignored and the socket peer is the client.
DEFAULT_TRUSTED_PROXY_HOPS = 0

# Only job-initiating endpoints are throttled
RATE_LIMITED_PATHS = frozenset({"/process", "/analyze"})
RATE_LIMIT_MESSAGE = "Too many requests, try again later."

# Request ID header
REQUEST_ID_HEADER = "X-Request-ID"
