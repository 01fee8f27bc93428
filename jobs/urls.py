from django.urls import path

from .views import AlertsView, CrawlCleanupView, CrawlStatusView, CrawlTriggerView, KeywordsView

urlpatterns = [
    path("crawl/trigger/", CrawlTriggerView.as_view(), name="crawl-trigger"),
    path("crawl/status/", CrawlStatusView.as_view(), name="crawl-status"),
    path("crawl/cleanup/", CrawlCleanupView.as_view(), name="crawl-cleanup"),
    path("monitoring/alerts/", AlertsView.as_view(), name="monitoring-alerts"),
    path("crawler/keywords/", KeywordsView.as_view(), name="crawler-keywords"),
]
