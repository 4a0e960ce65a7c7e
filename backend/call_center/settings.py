"""
Django settings for the Call Center lead distribution service.

Uses PostgreSQL as the database and django-rest-framework for the API layer.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() in ('true', '1', 'yes')

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

# Application definition
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'django_q',
    'dialer',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

# Don't redirect to add trailing slashes — API clients send exact URLs
APPEND_SLASH = False

ROOT_URLCONF = 'call_center.urls'

WSGI_APPLICATION = 'call_center.wsgi.application'

# Database — PostgreSQL in production, SQLite for local dev
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
            # Writers take the lock at BEGIN; a racing claim waits for the winner to commit
            'OPTIONS': {
                'transaction_mode': 'IMMEDIATE',
                'timeout': int(os.environ.get('SQLITE_TIMEOUT', '20')),
            },
            'TEST': {
                # File-backed so threaded tests get real cross-connection locking
                'NAME': os.environ.get('DB_TEST_NAME', str(BASE_DIR / 'test_db.sqlite3')),
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'call_center'),
            'USER': os.environ.get('DB_USER', 'postgres'),
            'PASSWORD': os.environ.get('DB_PASSWORD', 'postgres'),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }

STATIC_URL = '/static/'

# CORS
CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = [
    'http://localhost:3000',
    'http://localhost:5173',
    'http://127.0.0.1:3000',
    'http://127.0.0.1:5173',
]

# DRF
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_PAGINATION_CLASS': None,
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [],
}

# Retry policy
MAX_RETRY_ATTEMPTS = int(os.environ.get('MAX_RETRY_ATTEMPTS', '3'))
RETRY_COOLDOWN_HOURS = int(os.environ.get('RETRY_COOLDOWN_HOURS', '4'))

# Periodic distribution sweep interval
DISTRIBUTION_SWEEP_MINUTES = int(os.environ.get('DISTRIBUTION_SWEEP_MINUTES', '1'))

# django-q2 — lightweight task queue using the ORM broker (no Redis needed)
Q_CLUSTER = {
    'name': 'call-center',
    'workers': 2,
    'timeout': 60,
    'retry': 120,
    'orm': 'default',
    'bulk': 10,
    'catch_up': False,
    'sync': os.environ.get('Q_SYNC', 'False').lower() in ('true', '1', 'yes'),
}

# All datetimes are timezone-aware UTC
USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
}
