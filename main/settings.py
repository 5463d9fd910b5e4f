"""
Django settings for the POS API.

All deployment-specific values come from the environment (optionally loaded
from a ``.env`` file next to ``manage.py``).
"""
import os
from pathlib import Path
from urllib.parse import urlparse

from celery.schedules import crontab
from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 't', 'yes', 'y', 'on'}


def env_list(name, default=None):
    value = os.getenv(name)
    if value is None:
        return default or []
    return [item.strip() for item in value.split(',') if item.strip()]


DJANGO_ENV = os.getenv('DJANGO_ENV', 'dev').strip().lower()
if DJANGO_ENV not in {'dev', 'staging', 'prod'}:
    raise ImproperlyConfigured('DJANGO_ENV must be one of: dev, staging, prod.')

DEBUG = env_bool('DEBUG', default=DJANGO_ENV == 'dev')

SECRET_KEY = os.getenv('SECRET_KEY')
if not SECRET_KEY:
    if DJANGO_ENV != 'dev':
        raise ImproperlyConfigured('SECRET_KEY must be set when DJANGO_ENV is staging or prod.')
    SECRET_KEY = 'django-insecure-dev-only-key'

ALLOWED_HOSTS = env_list(
    'ALLOWED_HOSTS',
    default=['localhost', '127.0.0.1', 'testserver'] if DJANGO_ENV == 'dev' else [],
)

CORS_ALLOW_ALL_ORIGINS = env_bool('CORS_ALLOW_ALL_ORIGINS', default=DJANGO_ENV == 'dev')
CORS_ALLOWED_ORIGINS = env_list('CORS_ALLOWED_ORIGINS', default=[])

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third party
    'rest_framework',
    'oauth2_provider',
    'django_filters',
    'drf_spectacular',
    'corsheaders',

    # Local apps
    'main',
    'users.apps.UsersConfig',
    'stores',
    'inventory',
    'stock',
    'invoices.apps.InvoicesConfig',
    'expenses',
    'financial',
    'notifications',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'main.logging.RequestLogMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'main.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'main.wsgi.application'


# Database

DB_ENGINES = {
    'postgres': 'django.db.backends.postgresql',
    'postgresql': 'django.db.backends.postgresql',
    'mysql': 'django.db.backends.mysql',
}


def _db_config_from_url(database_url):
    parsed = urlparse(database_url)
    if parsed.scheme == 'sqlite':
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': parsed.path.lstrip('/') or str(BASE_DIR / 'db.sqlite3'),
        }
    if parsed.scheme not in DB_ENGINES:
        raise ImproperlyConfigured('DATABASE_URL must use a sqlite, postgres or mysql scheme.')
    if not parsed.path or parsed.path == '/':
        raise ImproperlyConfigured('DATABASE_URL must include a database name in the path.')
    return {
        'ENGINE': DB_ENGINES[parsed.scheme],
        'NAME': parsed.path.lstrip('/'),
        'USER': parsed.username or '',
        'PASSWORD': parsed.password or '',
        'HOST': parsed.hostname or '',
        'PORT': str(parsed.port or ''),
    }


database_url = os.getenv('DATABASE_URL', '').strip()
if database_url:
    DATABASES = {'default': _db_config_from_url(database_url)}
elif DJANGO_ENV == 'dev':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    raise ImproperlyConfigured('DATABASE_URL must be set when DJANGO_ENV is staging or prod.')

AUTH_USER_MODEL = 'users.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# REST framework / OAuth2

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'oauth2_provider.contrib.rest_framework.OAuth2Authentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'main.exceptions.custom_exception_handler',
}

ACCESS_TOKEN_EXPIRE_SECONDS = int(os.getenv('ACCESS_TOKEN_EXPIRE_SECONDS', str(24 * 60 * 60)))

OAUTH2_PROVIDER = {
    'ACCESS_TOKEN_EXPIRE_SECONDS': ACCESS_TOKEN_EXPIRE_SECONDS,
    'REFRESH_TOKEN_EXPIRE_SECONDS': 7 * 24 * 60 * 60,
    'SCOPES': {
        'read': 'Read scope',
        'write': 'Write scope',
    },
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'POS API',
    'DESCRIPTION': 'Multi-store point-of-sale backend',
    'VERSION': '1.0.0',
}


# Point-of-sale configuration

# Where invoices are persisted: database, local or firestore.
POS_DATA_SOURCE = os.getenv('POS_DATA_SOURCE', 'database').strip().lower()
POS_INVOICE_BACKENDS = {
    'database': 'invoices.backends.DatabaseBackend',
    'local': 'invoices.backends.LocalMemoryBackend',
    'firestore': 'invoices.backends.FirestoreBackend',
}
if POS_DATA_SOURCE not in POS_INVOICE_BACKENDS:
    raise ImproperlyConfigured(
        f"POS_DATA_SOURCE must be one of: {', '.join(sorted(POS_INVOICE_BACKENDS))}."
    )
POS_FIRESTORE_PROJECT = os.getenv('POS_FIRESTORE_PROJECT', '')
POS_FIRESTORE_COLLECTION = os.getenv('POS_FIRESTORE_COLLECTION', 'invoices')

POS_TAX_PRESETS = sorted({
    int(rate) for rate in env_list('POS_TAX_PRESETS', default=['0', '5', '12', '18', '28'])
})
POS_DEFAULT_TIMEZONE = os.getenv('POS_DEFAULT_TIMEZONE', 'Asia/Kolkata')

# Hour of the daily low-stock sweep, in POS_DEFAULT_TIMEZONE.
POS_STOCK_CHECK_HOUR = int(os.getenv('POS_STOCK_CHECK_HOUR', '8'))
if not 0 <= POS_STOCK_CHECK_HOUR <= 23:
    raise ImproperlyConfigured('POS_STOCK_CHECK_HOUR must be between 0 and 23.')


# Celery

CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', default=False)
CELERY_TIMEZONE = POS_DEFAULT_TIMEZONE
CELERY_BEAT_SCHEDULE = {
    'check-stock-levels-daily': {
        'task': 'notifications.tasks.check_stock_levels',
        'schedule': crontab(hour=POS_STOCK_CHECK_HOUR, minute=0),
    },
}


# Logging

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {
            '()': 'main.logging.JsonFormatter',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'json',
        },
    },
    'root': {'handlers': ['console'], 'level': LOG_LEVEL},
    'loggers': {
        'django': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'api.request': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}
