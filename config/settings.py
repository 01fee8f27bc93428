import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'change-me-now')
DEBUG = os.getenv('DJANGO_DEBUG', 'True') == 'True'
#내부 개발용 한정 모든 호스트 허가
ALLOWED_HOSTS = ["*"] # [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]

LANGUAGE_CODE = 'ko-kr'
TIME_ZONE = 'Asia/Seoul'
USE_I18N = True
USE_TZ = False

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'corsheaders',
    'django_celery_beat',

    'jobs',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
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

USE_SQLITE = os.getenv('DJANGO_USE_SQLITE', '0') == '1'
if USE_SQLITE:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'dev.sqlite3',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.mysql',
            'NAME': os.getenv('DB_NAME'),
            'USER': os.getenv('DB_USER'),
            'PASSWORD': os.getenv('DB_PASSWORD'),
            'HOST': os.getenv('DB_HOST', 'db'),
            'PORT': os.getenv('DB_PORT', '3306'),
            'OPTIONS': {
                'charset': 'utf8mb4',
                'init_command': "SET sql_mode='STRICT_TRANS_TABLES'",
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
}
CORS_ALLOW_ALL_ORIGINS = True

API_INTERNAL_TOKEN = os.getenv("API_INTERNAL_TOKEN", "internal_token_8h_7Kifc0r")


def _csv_env(name, default):
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [v.strip() for v in raw.split(",") if v.strip()]


# === 크롤링 ===
CRAWL_SOURCES = _csv_env("CRAWL_SOURCES", ["workTogether", "saramin", "work24", "jobkorea"])
CRAWL_CRON = os.getenv("CRAWL_CRON", "0 */6 * * *")  # 6시간마다
CRAWL_MAX_RETRIES = int(os.getenv("CRAWL_MAX_RETRIES", "3"))
CRAWL_RETRY_BACKOFF = [1, 2, 4]  # 초
CRAWL_RETRY_BACKOFF_CEILING = 5
CRAWL_QUEUE_ATTEMPTS = int(os.getenv("CRAWL_QUEUE_ATTEMPTS", "3"))
CRAWL_QUEUE_KEEP_COMPLETED = 100
CRAWL_QUEUE_KEEP_FAILED = 1000
CRAWL_WORKER_CONCURRENCY = int(os.getenv("CRAWL_WORKER_CONCURRENCY", "4"))
CRAWL_CACHE_TTL = 60 * 60
CRAWL_LOCK_ENABLED = os.getenv("CRAWL_LOCK_ENABLED", "1") == "1"
CRAWL_LOCK_TTL = 60 * 30
JOB_RETENTION_MONTHS = 3
DEFAULT_CRAWLER_KEYWORDS = ["장애인"]

# === 모니터링 ===
CRAWL_MONITORING = {
    "failure_rate": 0.2,           # 20% 초과 warning, 50% 초과 critical
    "critical_failure_rate": 0.5,
    "failure_window_hours": 6,
    "avg_crawl_seconds": 15 * 60,  # 초과 warning, 2배 초과 critical
    "duration_window_hours": 24,
    "consecutive_failures": 3,
    "alert_ttl": 60 * 60,
}
ALERT_EMAIL = os.getenv("ALERT_EMAIL", "")

# === 메일 (알림 발송) ===
EMAIL_HOST = os.getenv("SMTP_HOST", "")
EMAIL_PORT = int(os.getenv("SMTP_PORT", "587"))
EMAIL_HOST_USER = os.getenv("SMTP_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_USE_SSL = EMAIL_PORT == 465
EMAIL_USE_TLS = not EMAIL_USE_SSL and bool(EMAIL_HOST)
DEFAULT_FROM_EMAIL = os.getenv("SMTP_FROM", '"ReBridge" <noreply@rebridge.kr>')
if not EMAIL_HOST:
    # SMTP 설정이 없으면 콘솔로만 출력
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# === Celery / Redis ===
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = REDIS_URL
CELERY_RESULT_BACKEND = REDIS_URL
CELERY_TASK_DEFAULT_QUEUE = "celery"
CELERY_CRAWL_QUEUE = os.getenv("CELERY_CRAWL_QUEUE", "crawl-jobs")
CELERY_TASK_ROUTES = {
    "jobs.tasks.crawl_source": {"queue": CELERY_CRAWL_QUEUE},
}
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "Asia/Seoul"
CELERY_WORKER_CONCURRENCY = CRAWL_WORKER_CONCURRENCY
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True
CELERY_RESULT_EXPIRES = 60 * 60 * 24
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"


LOG_DIR = BASE_DIR / 'logs'
LOG_DIR.mkdir(exist_ok=True)
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'std': {'format': '[{levelname}] {asctime} {name}: {message}', 'style': '{'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'std'},
        'file': {
            'class': 'logging.FileHandler',
            'filename': str(LOG_DIR / 'django.log'),
            'formatter': 'std',
            'encoding': 'utf-8',
        },
    },
    'loggers': {
        'django': {'handlers': ['console', 'file'], 'level': 'INFO'},
        'celery': {'handlers': ['console', 'file'], 'level': 'INFO', 'propagate': False},
        'crawler': {'handlers': ['console', 'file'], 'level': 'INFO', 'propagate': False},
        'jobs': {'handlers': ['console', 'file'], 'level': 'INFO', 'propagate': False},
    },
}
