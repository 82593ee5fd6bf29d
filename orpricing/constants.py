API_BASE = "https://openrouter.ai/api/v1"
USER_AGENT = "or-pricing-cli"
HTTP_TIMEOUT_SECONDS = 30.0

CACHE_TTL_SECONDS = 300
CACHE_DIR_ENV = "OR_PRICING_CACHE_DIR"
MODELS_CACHE_FILE = "models.json"
PROJECT_MARKER = "pyproject.toml"

# pause between sequential endpoint lookups
ENDPOINT_DELAY_SECONDS = 0.3

ONE_MILLION = 1_000_000
QUANTIZATION_SENTINEL = "-"
STATUS_DEGRADED = -1

MAX_AMBIGUOUS_SHOWN = 15
MAX_AMBIGUOUS_SUGGESTIONS = 5

LEADERBOARD_URL = "https://openrouter.ai/rankings/trending"
LEADERBOARD_APP_URL = "https://openrouter.ai/apps?url={app_url}"
LEADERBOARD_CACHE_FILE = "leaderboard.json"
DEFAULT_APP_URL = "https://openclaw.ai/"
LEADERBOARD_DISPLAY_LIMIT = 20
