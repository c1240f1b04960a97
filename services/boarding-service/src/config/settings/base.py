"""Base settings for Boarding Service."""
import os
import sys
from pathlib import Path

from celery.schedules import crontab

BASE_DIR = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(BASE_DIR.parent.parent.parent))

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'apps.core',
    'apps.api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'shared.common.middleware.RequestIDMiddleware',
    'shared.common.middleware.LoggingMiddleware',
]

ROOT_URLCONF = 'config.urls'
TEMPLATES = [{'BACKEND': 'django.template.backends.django.DjangoTemplates', 'DIRS': [], 'APP_DIRS': True, 'OPTIONS': {'context_processors': ['django.template.context_processors.debug', 'django.template.context_processors.request', 'django.contrib.auth.context_processors.auth', 'django.contrib.messages.context_processors.messages']}}]
WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'boarding_service_db'),
        'USER': os.environ.get('DB_USER', 'boarding_service_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'boarding_service_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
    }
}

AUTH_PASSWORD_VALIDATORS = [{'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'}]
LANGUAGE_CODE = 'fr-fr'
TIME_ZONE = os.environ.get('TIME_ZONE', 'Europe/Paris')
USE_I18N = True
USE_TZ = True
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# The checkout API is public; operator endpoints use HasAdminAPIKey per view.
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_THROTTLE_CLASSES': ['rest_framework.throttling.AnonRateThrottle'],
    # payments: confirm and cancel, scoped in BookingViewSet.get_throttles
    'DEFAULT_THROTTLE_RATES': {'anon': '400/hour', 'payments': '10/hour'},
    'EXCEPTION_HANDLER': 'shared.common.exceptions.custom_exception_handler',
}

CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = [o for o in os.environ.get('CORS_ALLOWED_ORIGINS', '').split(',') if o]

REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/4')
CACHES = {'default': {'BACKEND': 'django_redis.cache.RedisCache', 'LOCATION': REDIS_URL}}
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', REDIS_URL)
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

# Celery Beat Schedule for periodic tasks
CELERY_BEAT_SCHEDULE = {
    'purge-expired-holds': {
        'task': 'boarding.purge_expired_holds',
        'schedule': crontab(minute='*/5'),  # Every 5 minutes
    },
}

# Events
EVENT_PUBLISHING_ENABLED = os.environ.get('EVENT_PUBLISHING_ENABLED', 'True').lower() == 'true'
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'log')
EVENT_WEBHOOK_URL = os.environ.get('EVENT_WEBHOOK_URL', None)

# Payments and tokens
STRIPE_SECRET_KEY = os.environ.get('STRIPE_SECRET_KEY', '')
CANCEL_TOKEN_SECRET = os.environ.get('CANCEL_TOKEN_SECRET', SECRET_KEY)
ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY', '')

# Every business constant of the boarding core. Read through apps.core.policy.
BOARDING_POLICY = {
    'capacity': {
        'daily_max': 5,
        'large_category_max': 2,
        'felin_max': 8,
        'large_size_tags': ['Gros chien'],
    },
    'min_lead_hours': 24,
    'hold_ttl_minutes': 15,
    'limited_threshold': 2,
    'strict_holds': os.environ.get('STRICT_HOLDS', 'False').lower() == 'true',
    'cancellation': {
        'free_cancellation_days': 3,
        'partial_refund_percent': 50,
        'no_refund_hours': 24,
    },
    'tariffs': {
        'flash_half_day': '12.00',
        'flash_full_day': '20.00',
        'flash_half_day_max_hours': 4,
        'sejour_day': '25.00',
        'sejour_multi_animal_discount_percent': 10,
        'sejour_late_surcharge': '12.00',
        'felin_day': '15.00',
        'felin_late_surcharge': '8.00',
        'late_departure_threshold_hours': 2,
        'default_day': '25.00',
        'default_large_day': '30.00',
    },
    'currency': 'eur',
    'cancel_token_ttl_days': 7,
}

SERVICE_NAME = 'boarding-service'
SERVICE_PORT = 8005
LOGGING_QUIET_PATHS = ('/health/',)

LOGGING = {'version': 1, 'disable_existing_loggers': False, 'formatters': {'json': {'()': 'pythonjsonlogger.json.JsonFormatter'}}, 'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json'}}, 'root': {'handlers': ['console'], 'level': 'INFO'}}
