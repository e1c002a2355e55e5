import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "rankpage-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "results",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "rankpage.urls"
WSGI_APPLICATION = "rankpage.wsgi.application"

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
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("RESULTS_DB_PATH", str(BASE_DIR / "database.db")),
    }
}

# Shared between the web process and manage.py runs; the table comes from a results migration.
CACHES = {
    "default": {
        "BACKEND": os.environ.get("DJANGO_CACHE_BACKEND", "django.core.cache.backends.db.DatabaseCache"),
        "LOCATION": os.environ.get("DJANGO_CACHE_LOCATION", "rankpage_cache"),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True
STATIC_URL = "static/"

REST_FRAMEWORK = {
    "EXCEPTION_HANDLER": "results.exceptions.results_exception_handler",
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
    },
    "loggers": {
        "results": {
            "handlers": ["console"],
            "level": os.environ.get("RESULTS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# Results pipeline
RESULTS_UNIVERSITY_NAME = os.environ.get("RESULTS_UNIVERSITY_NAME", "Bihar Engineering University, Patna")
RESULTS_BATCH_SIZE = int(os.environ.get("RESULTS_BATCH_SIZE", 500))
RESULTS_TOPPER_LIMIT = int(os.environ.get("RESULTS_TOPPER_LIMIT", 500))
RESULTS_INGEST_LOCK_TIMEOUT = int(os.environ.get("RESULTS_INGEST_LOCK_TIMEOUT", 3600))
RESULTS_DERIVE_MISSING_REMARKS = env_bool("RESULTS_DERIVE_MISSING_REMARKS", False)

# 1-indexed, inclusive digit positions of the course code inside a registration number
RESULTS_COURSE_CODE_POSITIONS = (3, 5)

RESULTS_EXAM_PERIOD_DEFAULTS = {
    "academic_year": "2024",
    "semester": 1,
    "exam_month": "May",
    "exam_year": 2025,
}
