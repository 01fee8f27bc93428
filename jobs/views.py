# jobs/views.py

import logging

from rest_framework.response import Response
from rest_framework.views import APIView

from crawler.exceptions import ConfigurationError

from .history import JobHistory
from .keywords import get_keywords, set_keywords
from .manager import get_manager
from .monitoring import CrawlerMonitoring
from .permissions import HasInternalAPIToken
from .serializers import CrawlRunSerializer, CrawlTriggerSerializer, KeywordsSerializer
from .tasks import enqueue_crawl, enqueue_scheduled_crawls

logger = logging.getLogger(__name__)


class CrawlTriggerView(APIView):
    """
    수동 트리거:
      - {"source": "saramin", "page": 2} -> 해당 (source, page) 한 건
      - {} -> 설정된 전체 source 1페이지
    큐에 넣기만 하고 202.
    """
    permission_classes = [HasInternalAPIToken]

    def post(self, request):
        serializer = CrawlTriggerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        source = serializer.validated_data.get("source")
        page = serializer.validated_data["page"]

        try:
            if source:
                tasks = [{"source": source, "page": page, "task_id": enqueue_crawl(source, page)}]
            else:
                tasks = [{"task_id": task_id} for task_id in enqueue_scheduled_crawls()]
        except ConfigurationError as e:
            return Response({"detail": str(e)}, status=400)

        return Response({"detail": "queued", "tasks": tasks}, status=202)


class CrawlStatusView(APIView):
    """
    크롤러 상태:
      - stats: 전체/소스별 공고 수, 최근 run 10건
      - overview: 소스별 24시간 성공률/평균 소요
      - queue: 완료/실패 작업 이력
    """
    permission_classes = [HasInternalAPIToken]

    def get(self, request):
        manager = get_manager()
        stats = manager.get_stats()
        stats["recent_crawl_runs"] = CrawlRunSerializer(stats["recent_crawl_runs"], many=True).data

        history = JobHistory()
        return Response({
            "stats": stats,
            "overview": manager.source_overview(),
            "queue": {
                "counts": history.counts(),
                "recent_completed": history.completed(),
                "recent_failed": history.failed(),
            },
        }, status=200)


class CrawlCleanupView(APIView):
    permission_classes = [HasInternalAPIToken]

    def post(self, request):
        deleted = get_manager().cleanup_expired_jobs()
        return Response({"deleted": deleted}, status=200)


class AlertsView(APIView):
    permission_classes = [HasInternalAPIToken]

    def get(self, request):
        return Response({"alerts": CrawlerMonitoring().get_active_alerts()}, status=200)

    def post(self, request):
        alerts = CrawlerMonitoring().check_and_alert()
        return Response({"alerts": [a.to_dict() for a in alerts]}, status=200)

    def delete(self, request):
        CrawlerMonitoring().clear_alerts()
        return Response(status=204)


class KeywordsView(APIView):
    permission_classes = [HasInternalAPIToken]

    def get(self, request):
        return Response({"keywords": get_keywords()}, status=200)

    def put(self, request):
        serializer = KeywordsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            keywords = set_keywords(serializer.validated_data["keywords"])
        except ValueError as e:
            return Response({"detail": str(e)}, status=400)
        return Response({"keywords": keywords}, status=200)
