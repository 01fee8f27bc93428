from rest_framework import serializers

from crawler.adapters import ADAPTER_CLASSES

from .models import CrawlRun


class CrawlRunSerializer(serializers.ModelSerializer):
    duration_seconds = serializers.SerializerMethodField()

    class Meta:
        model = CrawlRun
        fields = (
            "id",
            "source",
            "page",
            "status",
            "jobs_found",
            "jobs_new",
            "jobs_updated",
            "error_message",
            "started_at",
            "completed_at",
            "duration_seconds",
        )

    def get_duration_seconds(self, obj):
        duration = obj.duration
        return round(duration.total_seconds(), 1) if duration is not None else None


class CrawlTriggerSerializer(serializers.Serializer):
    """
    source 를 비우면 설정된 전체 source 를 1페이지씩 큐에 넣는다.
    """
    source = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, default=1)

    def validate_source(self, value):
        if value and value not in ADAPTER_CLASSES:
            raise serializers.ValidationError(f"No adapter found for source: {value}")
        return value


class KeywordsSerializer(serializers.Serializer):
    keywords = serializers.ListField(
        child=serializers.CharField(allow_blank=False, trim_whitespace=True),
        allow_empty=False,
    )
