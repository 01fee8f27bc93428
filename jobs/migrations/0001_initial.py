import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CrawlerConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("keywords", models.JSONField(default=list, verbose_name="검색 키워드")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일")),
            ],
            options={
                "verbose_name": "크롤러 설정",
                "verbose_name_plural": "크롤러 설정",
                "db_table": "crawler_config",
            },
        ),
        migrations.CreateModel(
            name="CrawlRun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("source", models.CharField(max_length=50, verbose_name="수집 사이트")),
                ("page", models.PositiveIntegerField(default=1, verbose_name="페이지")),
                ("status", models.CharField(
                    choices=[("running", "Running"), ("success", "Success"), ("failed", "Failed")],
                    default="running", max_length=20, verbose_name="상태",
                )),
                ("jobs_found", models.IntegerField(default=0, verbose_name="발견 공고 수")),
                ("jobs_new", models.IntegerField(default=0, verbose_name="신규 공고 수")),
                ("jobs_updated", models.IntegerField(default=0, verbose_name="갱신 공고 수")),
                ("error_message", models.TextField(blank=True, null=True, verbose_name="오류 메시지")),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="시작 시각")),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="완료 시각")),
            ],
            options={
                "verbose_name": "크롤링 실행 기록",
                "verbose_name_plural": "크롤링 실행 기록 목록",
                "db_table": "crawl_runs",
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(fields=["source", "started_at"], name="idx_crawlrun_source_started"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("source", models.CharField(max_length=50, verbose_name="수집 사이트")),
                ("external_id", models.CharField(max_length=255, verbose_name="사이트 공고 ID")),
                ("title", models.CharField(max_length=255, verbose_name="공고 제목")),
                ("company", models.CharField(blank=True, max_length=255, null=True, verbose_name="회사명")),
                ("location", models.JSONField(blank=True, null=True, verbose_name="근무지")),
                ("salary_range", models.JSONField(blank=True, null=True, verbose_name="급여 범위")),
                ("employment_type", models.CharField(blank=True, max_length=100, null=True, verbose_name="고용 형태")),
                ("description", models.TextField(blank=True, null=True, verbose_name="상세 설명")),
                ("is_disability_friendly", models.BooleanField(default=False, verbose_name="장애인 채용 여부")),
                ("crawled_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="수집 시각")),
                ("expires_at", models.DateTimeField(blank=True, null=True, verbose_name="마감일")),
                ("external_url", models.CharField(blank=True, default="", max_length=2083, verbose_name="원문 URL")),
                ("raw_data", models.JSONField(blank=True, null=True, verbose_name="원본 데이터")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일")),
            ],
            options={
                "verbose_name": "채용공고",
                "verbose_name_plural": "채용공고 목록",
                "db_table": "jobs",
                "ordering": ["-crawled_at"],
                "indexes": [
                    models.Index(fields=["crawled_at"], name="idx_job_crawled_at"),
                    models.Index(fields=["expires_at"], name="idx_job_expires_at"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("source", "external_id"), name="uniq_job_source_external_id"),
                ],
            },
        ),
    ]
