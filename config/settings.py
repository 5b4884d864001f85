USER_AGENT = "thistle-pull/0.1"

API_ROOT = "https://api.datathistle.com/v1"
EVENTS_URL = f"{API_ROOT}/events"
PING_URL = f"{API_ROOT}/ping"

API_KEY_ENV = "DATATHISTLE_API_KEY"
MIN_API_KEY_LENGTH = 50            # real keys are long JWTs (eyJ...)

# Fixed filter set for the London kids pull
PAGE_SIZE = 20
STATUS = "live"
TOWN = "London"
TAGS = "kids"                      # exact tag match
WINDOW_MONTHS = 12

TIMEOUT = 30                       # full pull
PROBE_TIMEOUT = 15
PING_TIMEOUT = 10
REQUEST_DELAY_SECONDS = 60         # polite pause after every full page

PULL_OUT_FILE = "datathistle-kids-london-full.json"
PROBE_OUT_FILE = "datathistle-full-response.json"
