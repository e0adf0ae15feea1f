"""Constants for the ClasseViva client."""

BASE_URL = "https://web.spaggiari.eu/rest/v1"

# Headers expected by the Spaggiari mobile API
API_KEY = "Tg1NWEwNGIgIC0K"
USER_AGENT = "CVVS/std/4.2.3 Android/12"
HEADER_API_KEY = "Z-Dev-ApiKey"
HEADER_AUTH_TOKEN = "Z-Auth-Token"

# Typical server-side session TTL in seconds, used for local expiry checks
SESSION_LIFETIME = 5400

# Configuration keys
CONF_BASE_URL = "base_url"
CONF_API_KEY = "api_key"
CONF_USER_AGENT = "user_agent"
CONF_SESSION_LIFETIME = "session_lifetime"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"

# Error code prefixes found in the ``error`` field of failed responses
ERROR_INVALID_DATE = "120"
ERROR_DATE_OUT_OF_RANGE = "122"
ERROR_NOTE_NOT_FOUND = "130"
ERROR_UNKNOWN_CATEGORY = "102"
ERROR_INVALID_TOKEN = "252"

# Placeholder used in batch results when a name is not known
MISSING_NAME = "N/D"
