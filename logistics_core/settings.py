import os
from pathlib import Path

from logistics_core.env_loader import load_env_from_file, env_bool, env_list

BASE_DIR = Path(__file__).resolve().parent.parent

# Try the project root first, then the package directory
for path in (BASE_DIR / 'env_var.env', Path(__file__).resolve().parent / 'env_var.env'):
    if load_env_from_file(path):
        break

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-only-secret-key-change-me')
DEBUG = env_bool('DEBUG', False)
ALLOWED_HOSTS = env_list('ALLOWED_HOSTS', ['localhost', '127.0.0.1'])

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'django_filters',
    'drf_yasg',
    'fleet',
    'customers',
    'assignment',
    'dispatches',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'logistics_core.urls'

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

WSGI_APPLICATION = 'logistics_core.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': os.getenv('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.getenv('DB_USER', ''),
        'PASSWORD': os.getenv('DB_PASSWORD', ''),
        'HOST': os.getenv('DB_HOST', ''),
        'PORT': os.getenv('DB_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'es-pe'
TIME_ZONE = os.getenv('TIME_ZONE', 'America/Lima')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'logistics_core.authentication.CallerHeaderAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
}

SWAGGER_SETTINGS = {
    'USE_SESSION_AUTH': False,
    'SECURITY_DEFINITIONS': {
        'CallerId': {'type': 'apiKey', 'in': 'header', 'name': 'X-Caller-Id'},
        'CallerRole': {'type': 'apiKey', 'in': 'header', 'name': 'X-Caller-Role'},
    },
}

# Dispatch numbering: PE-000001-2026
DISPATCH_NUMBER_PREFIX = os.getenv('DISPATCH_NUMBER_PREFIX', 'PE')
DISPATCH_NUMBER_MAX_ATTEMPTS = int(os.getenv('DISPATCH_NUMBER_MAX_ATTEMPTS', '5'))
DISPATCH_NUMBER_RETRY_DELAY_SECONDS = float(os.getenv('DISPATCH_NUMBER_RETRY_DELAY_SECONDS', '0.05'))

# Incomplete assignments older than this (and from before today) get auto-completed
ASSIGNMENT_AUTO_COMPLETE_AFTER_HOURS = int(os.getenv('ASSIGNMENT_AUTO_COMPLETE_AFTER_HOURS', '24'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        app: {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        }
        for app in ('fleet', 'customers', 'assignment', 'dispatches', 'logistics_core')
    },
}
