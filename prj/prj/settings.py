"""
Django settings for prj project.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ── Load .env file when running locally ──────────────────────────────────────
load_dotenv(Path(__file__).resolve().parent.parent.parent / '.env')

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    'SECRET_KEY',
    'django-insecure-dugsi-admin-local-development-key-change-me',
)

DEBUG = os.environ.get('DEBUG', 'True') == 'True'

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

# ── Application definition ────────────────────────────────────────────────────
# The family pipeline is pure and in-memory: no database, no auth, no admin.
INSTALLED_APPS = [
    'dugsi',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'prj.urls'

DATABASES = {}

# ── Internationalisation ──────────────────────────────────────────────────────
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'America/Chicago')
USE_I18N = True
USE_TZ = True

# ── Dugsi tuition ─────────────────────────────────────────────────────────────
# All amounts are in cents.  Rates are read on every lookup, so tests and
# deployments can override them without a restart of the pipeline.
DUGSI_TUITION_RATES = {
    'BASE_RATE':   int(os.environ.get('DUGSI_BASE_RATE', '8000')),         # 1st and 2nd child
    'THIRD_CHILD': int(os.environ.get('DUGSI_THIRD_CHILD_RATE', '7000')),  # 3rd child
    'FOURTH_PLUS': int(os.environ.get('DUGSI_FOURTH_PLUS_RATE', '6000')),  # every child after that
}

# Sanity ceiling for admin overrides (10 children at the default tiers).
DUGSI_MAX_EXPECTED_FAMILY_RATE = int(os.environ.get('DUGSI_MAX_EXPECTED_FAMILY_RATE', '65000'))

DUGSI_CURRENCY = os.environ.get('DUGSI_CURRENCY', 'USD')

# ── Logging ───────────────────────────────────────────────────────────────────
DUGSI_LOG_LEVEL = os.environ.get('DUGSI_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'dugsi': {
            'handlers': ['console'],
            'level': DUGSI_LOG_LEVEL,
            'propagate': False,
        },
    },
}
