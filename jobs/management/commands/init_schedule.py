import json
from dataclasses import replace

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from django_celery_beat.models import CrontabSchedule, IntervalSchedule, PeriodicTask

from crawler.exceptions import ConfigurationError
from jobs.schedule import default_schedule
from jobs.tasks import enqueue_scheduled_crawls


class Command(BaseCommand):
    help = "Create or update the periodic tasks for crawling, health checks and cleanup"

    def add_arguments(self, parser):
        parser.add_argument("--cron", default=None, help="Crawl cron expression (5 fields)")
        parser.add_argument("--run-now", action="store_true", help="Enqueue one crawl round right away")

    def handle(self, *args, **opts):
        schedule = default_schedule()
        if opts.get("cron"):
            schedule = replace(schedule, cron=opts["cron"])

        try:
            schedule.validate()
        except ConfigurationError as e:
            raise CommandError(str(e)) from e

        self._install(schedule)

        if opts.get("run_now"):
            task_ids = enqueue_scheduled_crawls(schedule)
            self.stdout.write(self.style.SUCCESS(f"✅ Initial crawl enqueued ({len(task_ids)} jobs)"))

    @transaction.atomic
    def _install(self, schedule):
        crontab, _ = CrontabSchedule.objects.get_or_create(**schedule.crontab_kwargs(), timezone="Asia/Seoul")
        self._upsert_task(
            name="Crawl all sources",
            task="jobs.tasks.schedule_crawls",
            schedule_fields={"crontab": crontab, "interval": None},
            description=f"{schedule.cron} / {','.join(schedule.sources)}",
        )

        hourly, _ = IntervalSchedule.objects.get_or_create(every=1, period=IntervalSchedule.HOURS)
        self._upsert_task(
            name="Crawler health check",
            task="jobs.tasks.check_crawler_health",
            schedule_fields={"interval": hourly, "crontab": None},
        )

        daily, _ = CrontabSchedule.objects.get_or_create(
            minute="0", hour="3", day_of_month="*", month_of_year="*", day_of_week="*",
            timezone="Asia/Seoul",
        )
        self._upsert_task(
            name="Cleanup expired jobs",
            task="jobs.tasks.cleanup_expired_jobs",
            schedule_fields={"crontab": daily, "interval": None},
        )

    def _upsert_task(self, name, task, schedule_fields, description=""):
        obj, created = PeriodicTask.objects.update_or_create(
            name=name,
            defaults={
                "task": task,
                "args": json.dumps([]),
                "start_time": timezone.now(),
                "enabled": True,
                "description": description,
                **schedule_fields,
            },
        )
        self.stdout.write(self.style.SUCCESS(
            f"✅ Periodic task set: {name} (created={created})"
        ))
        return obj
