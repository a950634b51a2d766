"""Tests for news curation data models."""

from news_curation.models import (
    Candidate,
    CurationResult,
    FailureReason,
    FeedbackSample,
    PipelineState,
    parse_timestamp,
)


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_utc_z_suffix(self):
        assert parse_timestamp("2025-01-18T09:30:00Z") == 1737192600

    def test_offset(self):
        assert parse_timestamp("2025-01-18T15:00:00+05:30") == 1737192600

    def test_missing_or_invalid(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None
        assert parse_timestamp("yesterday") is None


class TestCandidate:
    """Tests for Candidate."""

    def test_from_api(self):
        candidate = Candidate.from_api({
            "title": "Quad foreign ministers meet",
            "description": "Talks in Delhi",
            "url": "https://news.example/quad",
            "publishedAt": "2025-01-18T09:30:00Z",
            "source": {"name": "Reuters"},
        })

        assert candidate.title == "Quad foreign ministers meet"
        assert candidate.source_name == "Reuters"
        assert candidate.published_at == 1737192600

    def test_from_api_missing_fields(self):
        candidate = Candidate.from_api({"url": "https://news.example/bare", "source": None})

        assert candidate.title is None
        assert candidate.source_name is None
        assert candidate.published_at is None

    def test_from_api_source_as_plain_name(self):
        assert Candidate.from_api({"url": "https://news.example/a", "source": "Reuters"}).source_name == "Reuters"

    def test_from_api_source_of_unexpected_type(self):
        assert Candidate.from_api({"url": "https://news.example/a", "source": ["Reuters"]}).source_name is None


class TestFeedbackSample:
    """Tests for FeedbackSample.as_dict."""

    def test_reason_included_when_set(self):
        sample = FeedbackSample(title="T", category="Global Diplomacy", reason="R")

        assert sample.as_dict() == {"title": "T", "category": "Global Diplomacy", "reason": "R"}

    def test_reason_omitted_when_none(self):
        assert FeedbackSample(title="T", category=None).as_dict() == {"title": "T", "category": None}


class TestCurationResult:
    """Tests for CurationResult.error."""

    def test_error_text_from_failure(self):
        result = CurationResult(success=False, state=PipelineState.FAILED, failure=FailureReason.NO_SELECTIONS)

        assert result.error == "no suitable articles found"

    def test_no_error_on_success(self):
        assert CurationResult(success=True, state=PipelineState.COMPLETED).error is None
