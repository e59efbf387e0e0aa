from decouple import config as _config

from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK
from .base import *  # noqa

DEBUG = True

# In dev, allow the browsable API and relaxed CORS
CORS_ALLOW_ALL_ORIGINS = True

# Optional Redis cache for local parity

_REDIS_URL = _config("REDIS_URL", default="")
if _REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": _REDIS_URL,
        }
    }
    SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"

REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
_rates = {**BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {})}
_rates.update(
    {
        # Looser limits while iterating on the dashboard locally
        "analytics": "240/min",
        "data_transfer": "30/min",
    }
)
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = _rates

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "stockroom": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
    },
}
