from datetime import datetime, timedelta

from schemas.assessment import FormData
from schemas.diary import DiaryAssessmentContext, RecentEntry
from services.prompt_builder import (
    build_analysis_prompt,
    build_diary_prompt,
    build_follow_up_prompt,
    build_insights_prompt,
    pain_trend,
    urgency_hint,
)


def _form(**kw):
    return FormData(**{"pain_level": 5, **kw})


def test_analysis_prompt_is_deterministic():
    form = _form(story="Hurts when I climb stairs", pain_types=["Dull"])
    first = build_analysis_prompt(["Left Knee"], 3, form)
    second = build_analysis_prompt(["Left Knee"], 3, form)
    assert first == second


def test_high_pain_knee_prompt():
    prompt = build_analysis_prompt(["Right Knee"], 1, _form(pain_level=8))
    assert "Dr. Robert LaPrade" in prompt
    assert 'Use "high" as the urgency level' in prompt
    assert 'use "A Silver Lining"' in prompt


def test_low_pain_uses_good_news_title():
    prompt = build_analysis_prompt(["Right Knee"], 0, _form(pain_level=2))
    assert 'Use "low" as the urgency level' in prompt
    assert 'use "The Good News"' in prompt


def test_urgency_hint_boundaries():
    assert urgency_hint(3) == "low"
    assert urgency_hint(4) == "moderate"
    assert urgency_hint(6) == "moderate"
    assert urgency_hint(7) == "high"


def test_unmatched_area_has_no_expert_block():
    prompt = build_analysis_prompt(["Head"], 0, _form())
    assert "RELEVANT EXPERT KNOWLEDGE" not in prompt
    # General resources are always offered.
    assert "For pain understanding:" in prompt


def test_empty_fields_are_omitted():
    prompt = build_analysis_prompt(["Lower Back"], 0, _form(frequency="", story=""))
    assert "Frequency:" not in prompt
    assert "THEIR STORY" not in prompt
    assert "Pain Level: 5/10" in prompt


def test_narratives_are_quoted():
    prompt = build_analysis_prompt(["Lower Back"], 0, _form(tried_so_far="Ice and rest"))
    assert "WHAT THEY'VE TRIED:\n\"\"\"Ice and rest\"\"\"" in prompt


def test_pain_trend():
    assert pain_trend([]) == "stable"
    assert pain_trend([5]) == "stable"
    assert pain_trend([8, 8, 4, 4]) == "improving"
    assert pain_trend([3, 3, 3, 8]) == "worsening"
    assert pain_trend([5, 5, 5, 5]) == "stable"
    # Odd counts give the extra value to the later half.
    assert pain_trend([8, 4, 4]) == "improving"


def test_pain_trend_uses_last_ten_only():
    levels = [1] * 5 + [6] * 10
    assert pain_trend(levels) == "stable"


def _assessment():
    return DiaryAssessmentContext(
        selected_muscles=["Left Knee"],
        pain_level=6,
        goals="Hike again",
        story="Twisted it on a trail",
        analysis={"reassurance": {"title": "The Good News", "message": "Knees are resilient."}},
        created_at=datetime(2025, 3, 1),
    )


def test_diary_prompt_orders_recent_entries_and_reports_trend():
    base = datetime(2025, 3, 2)
    # Newest first, as the client sends them.
    recent = [
        RecentEntry(entry_type="pain", pain_level=3, created_at=base + timedelta(days=3)),
        RecentEntry(entry_type="pain", pain_level=3, created_at=base + timedelta(days=2)),
        RecentEntry(entry_type="workout", pain_level=7, created_at=base + timedelta(days=1)),
        RecentEntry(entry_type="pain", pain_level=7, created_at=base),
    ]
    prompt = build_diary_prompt("pain", "Better today", 3, _assessment(), recent)
    assert "Trend: improving" in prompt
    assert "Average pain: 5.0/10" in prompt
    assert "Entry types: pain, workout, pain, pain" in prompt
    assert "left knee pain" in prompt.lower()
    assert "Key insight from analysis: Knees are resilient." in prompt
    assert "(2025-03-01)" in prompt


def test_diary_prompt_without_history():
    ctx = DiaryAssessmentContext()
    prompt = build_diary_prompt("general", "Just checking in", None, ctx, [])
    assert "Average pain: N/A\n" in prompt
    assert "Pain level: Not specified" in prompt
    assert "affected area pain" in prompt


def test_follow_up_prompt_includes_thread():
    prompt = build_follow_up_prompt("pain", "Sore after hike", "Try shorter hikes.", "How short?", _assessment())
    assert '"Try shorter hikes."' in prompt
    assert '"How short?"' in prompt


def test_insights_prompt_is_chronological():
    entries = [
        RecentEntry(entry_text="second", created_at=datetime(2025, 3, 5)),
        RecentEntry(entry_text="first", created_at=datetime(2025, 3, 1)),
    ]
    prompt = build_insights_prompt(entries, _assessment())
    assert prompt.index('"first"') < prompt.index('"second"')
    assert "2025-03-01 - 2025-03-05" in prompt
