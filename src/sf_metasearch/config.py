"""Settings for sf-metasearch."""

API_VERSION = "v64.0"

# Environment variables backing the CLI options
ENV_INSTANCE_URL = "SF_INSTANCE_URL"
ENV_ACCESS_TOKEN = "SF_ACCESS_TOKEN"
ENV_API_VERSION = "SF_API_VERSION"
ENV_TOKEN_COMMAND = "SF_TOKEN_COMMAND"

# Search limits
MIN_TERM_LENGTH = 2
MAX_RESULTS = 50
MAX_MATCHES_PER_ITEM = 15
MAX_DOCUMENT_MATCHES = 10
SNIPPET_RADIUS = 50
MAX_FIELD_SNIPPET = 100

# Timeouts in seconds
DEFAULT_TIMEOUT = 10.0
DOCUMENT_FETCH_TIMEOUT = 10.0
FALLBACK_SEARCH_TIMEOUT = 10.0
REFERENCE_QUERY_TIMEOUT = 10.0

# Flow XML documents fetched at once
DOCUMENT_FETCH_CONCURRENCY = 3

# Row limit for field reference lookups
REFERENCE_QUERY_LIMIT = 100
