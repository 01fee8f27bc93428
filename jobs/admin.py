from django.contrib import admin
from .models import CrawlerConfig, CrawlRun, Job


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "source",
        "external_id",
        "title",
        "company",
        "is_disability_friendly",
        "crawled_at",
        "expires_at",
    )
    search_fields = ("title", "company", "external_id")
    list_filter = ("source", "is_disability_friendly")


@admin.register(CrawlRun)
class CrawlRunAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "source",
        "page",
        "status",
        "jobs_found",
        "jobs_new",
        "jobs_updated",
        "started_at",
        "completed_at",
    )
    list_filter = ("status", "source")
    readonly_fields = ("started_at", "completed_at")


@admin.register(CrawlerConfig)
class CrawlerConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "keywords", "updated_at")
