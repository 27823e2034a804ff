from __future__ import annotations

from pathlib import Path

from apps.core.config.env import get_runtime_settings

BASE_DIR = Path(__file__).resolve().parent.parent
RUNTIME = get_runtime_settings()

SECRET_KEY = RUNTIME.secret_key
DEBUG = RUNTIME.debug
ALLOWED_HOSTS = list(RUNTIME.allowed_hosts)

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_filters",
    "apps.core",
    "apps.projects",
    "apps.donations",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "apps.core.middleware.RequestIdMiddleware",
    "apps.core.middleware.StructuredRequestLogMiddleware",
    "apps.core.middleware.SecurityHeadersMiddleware",
    "apps.core.error_handlers.UnifiedErrorMiddleware",
]

ROOT_URLCONF = "donation_tracker.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "donation_tracker.wsgi.application"
ASGI_APPLICATION = "donation_tracker.asgi.application"

if RUNTIME.db_profile == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": RUNTIME.db_name,
            "USER": RUNTIME.db_user,
            "PASSWORD": RUNTIME.db_password,
            "HOST": RUNTIME.db_host,
            "PORT": RUNTIME.db_port,
            "CONN_MAX_AGE": 60,
        }
    }
else:
    # IMMEDIATE transactions plus a busy timeout let concurrent writers queue
    # on the database lock instead of failing fast.
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": Path(RUNTIME.sqlite_path) if RUNTIME.sqlite_path else BASE_DIR / "donation_tracker.sqlite3",
            "OPTIONS": {
                "timeout": 20,
                "transaction_mode": "IMMEDIATE",
            },
            "TEST": {
                "NAME": str(BASE_DIR / "test_donation_tracker.sqlite3"),
            },
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "COERCE_DECIMAL_TO_STRING": True,
    "DATETIME_FORMAT": "iso-8601",
}

RUNTIME_ENV = RUNTIME.env
API_VERSION = RUNTIME.api_version
CORS_ALLOWED_ORIGIN = RUNTIME.cors_origin
RATE_LIMIT_ENABLED = RUNTIME.rate_limit_enabled
RATE_LIMIT_WINDOW_SECONDS = RUNTIME.rate_limit_window_seconds
RATE_LIMIT_MAX = RUNTIME.rate_limit_max
ATOMIC_DONATION_WRITES = RUNTIME.atomic_donation_writes

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "loggers": {
        "donation_tracker": {
            "handlers": ["console"],
            "level": RUNTIME.log_level,
            "propagate": True,
        }
    },
}
