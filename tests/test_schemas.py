from datetime import datetime

from schemas.diary import DiaryAssessmentContext, RecentEntry


def test_aware_timestamps_become_naive_utc():
    entry = RecentEntry.model_validate({"createdAt": "2025-03-01T12:00:00+02:00"})
    assert entry.created_at == datetime(2025, 3, 1, 10, 0)
    assert entry.created_at.tzinfo is None


def test_naive_timestamps_are_untouched():
    entry = RecentEntry.model_validate({"createdAt": "2025-03-01T12:00:00"})
    assert entry.created_at == datetime(2025, 3, 1, 12, 0)


def test_mixed_entries_compare():
    entries = [
        RecentEntry.model_validate({"createdAt": "2025-03-02T08:00:00Z"}),
        RecentEntry.model_validate({"createdAt": "2025-03-01T08:00:00"}),
    ]
    assert min(e.created_at for e in entries) == datetime(2025, 3, 1, 8, 0)


def test_assessment_context_timestamp_normalised():
    ctx = DiaryAssessmentContext.model_validate({"createdAt": "2025-03-01T00:30:00+01:00"})
    assert ctx.created_at == datetime(2025, 2, 28, 23, 30)
