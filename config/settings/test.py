from .base import *  # noqa
from .base import BASE_DIR
from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK

# Test settings: force SQLite regardless of DATABASE_ENGINE
DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

TIME_ZONE = "UTC"
INVENTORY_STOCK_OUT_POLICY = "clamp"

# Relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    key: "10000/min" for key in BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {})
}
