"""Django settings for convenimus project.

Values come from the environment (or a ``.env`` file next to ``src/``) through
django-environ.
"""

from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    EVENT_REMINDER_LOOKAHEAD_HOURS=(int, 24),
    LOG_LEVEL=(str, "INFO"),
    TIME_ZONE=(str, "UTC"),
)
environ.Env.read_env(BASE_DIR.parent.parent / ".env")

SECRET_KEY = env("SECRET_KEY", default="django-insecure-convenimus-local-only")
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "convenimus.adapters.db.django.apps.DBMainConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "convenimus.binds.RepositoryInjectionMiddleware",
]

ROOT_URLCONF = "convenimus.config.urls"

DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "db_main.User"

LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE")
USE_I18N = True
USE_TZ = True

# Meetings

# Maximum participants per meeting provider, e.g. {"zoom": 100}
MEETINGS_MAX_PARTICIPANTS: dict[str, int] = env.json(
    "MEETINGS_MAX_PARTICIPANTS", default={}
)
EVENT_REMINDER_LOOKAHEAD_HOURS = env("EVENT_REMINDER_LOOKAHEAD_HOURS")

# Logging

LOG_LEVEL = env("LOG_LEVEL").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        }
    },
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "verbose"}},
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "convenimus": {"level": LOG_LEVEL},
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
