# PATH: /Taskboard/taskboard/settings.py
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# NOTE: In production, SECRET_KEY must come from environment for security.
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-taskboard-key')

# DEBUG defaults to True for dev; set DEBUG=0/false in production.
DEBUG = str(os.environ.get('DEBUG', '1')).lower() in {'1', 'true', 'yes'}

_env_allowed = os.environ.get('ALLOWED_HOSTS')
ALLOWED_HOSTS: list[str] = (
    [h for h in (_env_allowed.split() if _env_allowed else ['*']) if h]
)

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'jcalendar',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.locale.LocaleMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'taskboard.urls'

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
            ],
        },
    }
]

WSGI_APPLICATION = 'taskboard.wsgi.application'

# The calendar app keeps no tables of its own; the database only backs
# Django's auth/session apps.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DJANGO_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
    }
}

LANGUAGE_CODE = 'fa'
TIME_ZONE = 'Asia/Tehran'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- Calendar ---
# Dotted path to a callable (member_id, date_from, date_to) -> iterable of task rows.
JCALENDAR_TASK_SOURCE = os.environ.get('JCALENDAR_TASK_SOURCE', 'jcalendar.sources.no_tasks')
# JSON list of task rows, read by jcalendar.sources.json_file_source.
JCALENDAR_TASKS_FILE = os.environ.get('JCALENDAR_TASKS_FILE', '')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '[{levelname}] {name}: {message}', 'style': '{'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'loggers': {
        'jcalendar': {
            'handlers': ['console'],
            'level': os.environ.get('JCALENDAR_LOG_LEVEL', 'WARNING'),
        },
    },
}
