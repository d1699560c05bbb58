"""
Django settings for procurement_hub project.

Values come from environment variables with defaults that are safe for local
development and the test suite.
"""
import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=''):
    return [item.strip() for item in os.environ.get(name, default).split(',') if item.strip()]


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-procurement-hub-local-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver')


# Application definition

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',

    # Core
    'core.user_accounts',
    'core.approval',
    'core.audit',

    # Procurement
    'procurement.projects',
    'procurement.suppliers',
    'procurement.items',
    'procurement.material_requests',
    'procurement.rfq',
    'procurement.quotes',
    'procurement.PR',
    'procurement.po',
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

ROOT_URLCONF = 'procurement_hub.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'procurement_hub.wsgi.application'


# Database

DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE.endswith('sqlite3'):
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'procurement_hub'),
            'USER': os.environ.get('DB_USER', ''),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', ''),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_USER_MODEL = 'user_accounts.CustomUser'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]


# Internationalization

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'


# Django REST Framework

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'procurement_hub.response_formatter.StandardizedJSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'procurement_hub.response_formatter.custom_exception_handler',
    'DEFAULT_PAGINATION_CLASS': 'procurement_hub.pagination.StandardResultsSetPagination',
    'PAGE_SIZE': 20,
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.environ.get('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
}


# Email

EMAIL_BACKEND = os.environ.get('EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', 'procurement@company.com')


# Procurement domain configuration

PROCUREMENT = {
    'DEFAULT_CURRENCY': os.environ.get('PROCUREMENT_CURRENCY', 'AED'),
    'DEFAULT_PAYMENT_TERMS': os.environ.get('PROCUREMENT_PAYMENT_TERMS', 'Net 30'),
    'DEFAULT_DELIVERY_ADDRESS': os.environ.get('PROCUREMENT_DELIVERY_ADDRESS', 'Main Warehouse'),
    'PORTAL_BASE_URL': os.environ.get('PROCUREMENT_PORTAL_BASE_URL', 'https://portal.example.com'),
    'NOTIFICATION_MAILBOXES': {
        'procurement': 'procurement@company.com',
        'approver': 'approver@company.com',
        'requester': 'requester@company.com',
        'admin': 'admin@company.com',
        'compliance': 'compliance@company.com',
        'project': 'project@company.com',
    },
    'NOTIFICATIONS_FAIL_SILENTLY': env_bool('PROCUREMENT_NOTIFICATIONS_FAIL_SILENTLY', True),
    'AUTO_GENERATE_PR_ON_QUOTE_APPROVAL': env_bool('PROCUREMENT_AUTO_GENERATE_PR', False),
    'AUTO_GENERATE_PO_ON_PR_APPROVAL': env_bool('PROCUREMENT_AUTO_GENERATE_PO', False),
    'COMPLIANCE_EXPIRY_WARNING_DAYS': int(os.environ.get('PROCUREMENT_COMPLIANCE_WARNING_DAYS', '30')),
}


# Logging

PROCUREMENT_LOG_LEVEL = os.environ.get('PROCUREMENT_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
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
        'level': 'WARNING',
    },
    'loggers': {
        'core': {
            'handlers': ['console'],
            'level': PROCUREMENT_LOG_LEVEL,
            'propagate': False,
        },
        'procurement': {
            'handlers': ['console'],
            'level': PROCUREMENT_LOG_LEVEL,
            'propagate': False,
        },
    },
}
