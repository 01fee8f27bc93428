import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("rebridge")
app.config_from_object("django.conf:settings", namespace="CELERY")

# 태스크 + 시그널 핸들러(큐 이력, 워커 종료 정리)가 모두 jobs.tasks 에 있다
app.conf.imports = ("jobs.tasks",)

# 워커 실행:
#   celery -A config worker -Q celery,crawl-jobs
#   celery -A config beat
