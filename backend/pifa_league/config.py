import os

def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1

# Seconds a computed standings table stays cached.
STANDINGS_CACHE_TTL = _int_env("STANDINGS_CACHE_TTL", 60)

RATE_LIMIT_SCORE_UPDATES = os.getenv("RATE_LIMIT_SCORE_UPDATES") or "30/minute"
