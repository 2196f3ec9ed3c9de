"""Core Django settings for cloudvault.

Database, installed apps, middleware and authentication. Values that
differ between deployments are read from the environment via decouple.
"""

from typing import Final

from cloudvault.settings.components import BASE_DIR, config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='change-me')

INSTALLED_APPS: Final = (
    # Our apps:
    'cloudvault.apps.files',
    'cloudvault.apps.sharing',
    'cloudvault.apps.analytics',

    # Default django apps:
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'django.contrib.admin',

    # Third party apps:
    'rest_framework',
    'storages',
)

MIDDLEWARE: Final = (
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
)

ROOT_URLCONF = 'cloudvault.urls'

WSGI_APPLICATION = 'cloudvault.wsgi.application'

_DATABASE_ENGINE: Final = config(
    'DJANGO_DATABASE_ENGINE',
    default='django.db.backends.sqlite3',
)

# Metadata store. SQLite by default, any Django backend via environment.
DATABASES = {
    'default': {
        'ENGINE': _DATABASE_ENGINE,
        'NAME': config(
            'DJANGO_DATABASE_NAME',
            default=str(BASE_DIR.joinpath('cloudvault.sqlite3')),
        ),
        'USER': config('DJANGO_DATABASE_USER', default=''),
        'PASSWORD': config('DJANGO_DATABASE_PASSWORD', default=''),
        'HOST': config('DJANGO_DATABASE_HOST', default=''),
        'PORT': config('DJANGO_DATABASE_PORT', default=''),
    },
}

# Bound how long a write waits on a locked database (seconds)
if _DATABASE_ENGINE.endswith('sqlite3'):
    DATABASES['default']['OPTIONS'] = {
        'timeout': config('DJANGO_DATABASE_TIMEOUT', cast=int, default=20),
    }
    # In-memory test databases lock per table and never wait on a lock
    DATABASES['default']['TEST'] = {
        'NAME': str(BASE_DIR.joinpath('cloudvault_test.sqlite3')),
    }
else:
    DATABASES['default']['OPTIONS'] = {
        'connect_timeout': config(
            'DJANGO_DATABASE_TIMEOUT',
            cast=int,
            default=20,
        ),
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Internationalization
LANGUAGE_CODE = 'en-us'

USE_I18N = True

TIME_ZONE = 'UTC'
USE_TZ = True

# Static files (admin only)
STATIC_URL = '/static/'

TEMPLATES = [{
    'APP_DIRS': True,
    'BACKEND': 'django.template.backends.django.DjangoTemplates',
    'OPTIONS': {
        'context_processors': [
            'django.template.context_processors.debug',
            'django.template.context_processors.request',
            'django.contrib.auth.context_processors.auth',
            'django.contrib.messages.context_processors.messages',
        ],
    },
}]

# Uploads are held in memory up to this size before spooling to disk
FILE_UPLOAD_MAX_MEMORY_SIZE = 5 * 1024 * 1024

AUTHENTICATION_BACKENDS = (
    'django.contrib.auth.backends.ModelBackend',
)

# JSON API: session auth, result envelope on every error
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.MultiPartParser',
        'rest_framework.parsers.FormParser',
    ],
    'EXCEPTION_HANDLER': 'cloudvault.apps.files.http.envelope_exception_handler',
}
