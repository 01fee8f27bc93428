import json

from django.core.management.base import BaseCommand, CommandError

from crawler.adapters import SOURCES
from crawler.exceptions import ConfigurationError
from jobs.manager import get_manager
from jobs.tasks import enqueue_crawl


class Command(BaseCommand):
    help = "Crawl one page of a source (queued by default, --sync runs in this process)"

    def add_arguments(self, parser):
        parser.add_argument("source", help=f"One of: {', '.join(SOURCES)}")
        parser.add_argument("--page", type=int, default=1)
        parser.add_argument("--sync", action="store_true", help="Run in-process instead of enqueueing")

    def handle(self, *args, **opts):
        source, page = opts["source"], opts["page"]
        if page < 1:
            raise CommandError("--page must be >= 1")

        if not opts["sync"]:
            try:
                task_id = enqueue_crawl(source, page)
            except ConfigurationError as e:
                raise CommandError(str(e)) from e
            self.stdout.write(self.style.SUCCESS(f"✅ Enqueued {source} page={page} (task={task_id})"))
            return

        manager = get_manager()
        try:
            result = manager.run_crawl(source, page)
        except ConfigurationError as e:
            raise CommandError(str(e)) from e
        finally:
            manager.cleanup()

        self.stdout.write(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        if not result.ok:
            raise CommandError(f"crawl failed: {result.error}")
        self.stdout.write(self.style.SUCCESS("✅ Crawl finished"))
