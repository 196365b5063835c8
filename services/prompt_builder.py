"""Prompt templates for the pain analysis and the recovery diary.

The analysis prompt is assembled in a fixed order:

    persona -> empathy guidelines -> pain science -> expert knowledge
    -> resources -> patient data -> closing instructions + JSON schema

Everything here is a pure function of its arguments and the static tables in
``services.expert_knowledge``; no clock or randomness is read, so identical
inputs give identical prompts.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from schemas.assessment import FormData
from schemas.diary import DiaryAssessmentContext, RecentEntry
from services.expert_knowledge import (
    MOBILITY_EXPERT,
    PAIN_SCIENCE_EXPERT,
    get_experts_for_areas,
    get_principles_for_areas,
)

Trend = Literal["improving", "stable", "worsening"]

TREND_WINDOW = 10
TREND_THRESHOLD = 0.5
STORY_EXCERPT_CHARS = 300

SYSTEM_CONTEXT = """You are a compassionate, knowledgeable pain assessment companion - like a wise friend who happens to have deep expertise in sports medicine and rehabilitation. You speak with warmth and understanding, not clinical detachment.

YOUR VOICE:
- Speak like a trusted friend who truly listens, not a medical textbook
- Acknowledge the person's specific story and journey - reference what they told you
- Use "I can see..." and "It sounds like..." to show you've heard them
- Be reassuring without being dismissive - their pain is real and valid
- Explain the "why" so they understand their body, not just what to do

CORE PRINCIPLES:
1. EMPATHY FIRST - Start by acknowledging their experience. They're dealing with something hard.
2. EDUCATE - Help them understand why this is happening. Knowledge reduces fear.
3. REASSURE - Most injuries are normal, treatable, and temporary. Anxiety makes pain worse.
4. EMPOWER - Give them principles they can own, not just a list of exercises to follow blindly.
5. BE SPECIFIC - Reference their actual story, activities, timeline. Generic advice feels hollow."""

EMPATHY_GUIDELINES = """WRITING THE SUMMARY:
The summary should feel like the opening of a conversation with someone who truly gets it. NOT a clinical assessment.

BAD (too clinical):
"You're experiencing chronic lower back pain with recurring flare-ups, likely from a combination of muscle strain and movement pattern dysfunction."

GOOD (human, references their story):
"I can see you've been dealing with this back pain for a while now - and that cycling session followed by yoga that seemed to kick things off is a really common pattern. Your body is essentially telling you it got overloaded in a vulnerable position. The good news? This kind of thing is very treatable."

KEY ELEMENTS:
1. Start with acknowledgment ("I can see...", "It sounds like...")
2. Reference their specific story (the activities, timeline, what makes it worse/better)
3. Validate their experience (this is real, this matters)
4. End with a hopeful pivot (but here's the good news...)

The summary should make them feel HEARD, not just diagnosed."""

PAIN_SCIENCE_CONTEXT = """PAIN SCIENCE INSIGHTS (from Prof. Lorimer Moseley's research):
- Pain is protection, not damage measurement - it's your brain protecting you, not a readout of tissue damage
- Understanding pain actually reduces pain - knowledge is therapeutic
- Pain systems can become sensitized over time - this isn't damage getting worse
- Recovery has many pathways - sleep, stress, beliefs, and movement all matter
- All pain is real - never dismiss someone's experience

Use these principles to help reduce their anxiety and reframe their understanding."""

RESPONSE_SCHEMA_DESCRIPTION = """{
  "summary": "A warm, personalized 2-3 sentence opening that acknowledges their specific story. Reference their activities, timeline, and what they told you. End with a hopeful note.",
  "urgency": "low" | "moderate" | "high",
  "understandingWhatsHappening": "A detailed but accessible paragraph explaining WHY this is happening. Connect anatomy to their specific situation.",
  "reassurance": {
    "title": "The Good News" (for low/moderate urgency) OR "A Silver Lining" (for high urgency),
    "message": "A genuinely encouraging paragraph. Acknowledge the difficulty but emphasize treatability and that this is common and manageable."
  },
  "possibleConditions": [
    {
      "name": "Condition name (use accessible terms, not just medical jargon)",
      "likelihood": "Likely" | "Possible" | "Less Likely",
      "description": "Clear explanation of what this is and why it matches their symptoms"
    }
  ],
  "watchFor": ["Red flag symptoms that would warrant prompt medical attention - be specific"],
  "recoveryPrinciples": ["Principles for recovery - explain the 'why', not just the 'what'"],
  "avoid": ["Specific activities or behaviors to temporarily modify or avoid - with brief context on why"],
  "safeToTry": ["Activities that are generally safe and may help - with brief reassurance"],
  "timeline": "A realistic, hopeful paragraph about expected recovery. Progress isn't linear; consistency beats intensity.",
  "resources": [
    {
      "name": "Expert or resource name",
      "type": "Specialist" | "Book" | "Website" | "Approach",
      "why": "When and why this resource would be helpful"
    }
  ]
}"""


def urgency_hint(pain_level: int) -> str:
    if pain_level >= 7:
        return "high"
    if pain_level >= 4:
        return "moderate"
    return "low"


def reassurance_title(urgency: str) -> str:
    return "A Silver Lining" if urgency == "high" else "The Good News"


def _build_expert_context(muscle_labels: Sequence[str]) -> str:
    experts = get_experts_for_areas(muscle_labels)
    if not experts:
        return ""

    lines = ["RELEVANT EXPERT KNOWLEDGE:"]
    for e in experts:
        lines.append(f"- {e.name} ({e.credentials}, {e.institution}): {e.specialty}. Key insight: {e.why_recommended}")

    principles = get_principles_for_areas(muscle_labels)
    if principles:
        lines.append("")
        lines.append("EVIDENCE-BASED PRINCIPLES FOR THIS AREA:")
        lines.extend(f"- {p}" for p in principles[:4])
    return "\n".join(lines)


def _build_resources_context(muscle_labels: Sequence[str]) -> str:
    lines = ["RECOMMENDED RESOURCES TO SUGGEST:"]
    for e in get_experts_for_areas(muscle_labels):
        if e.resources:
            lines.append(f"- {e.name}: {', '.join(e.resources)}")
    lines.append(f"- For pain understanding: {', '.join(PAIN_SCIENCE_EXPERT.resources)}")
    lines.append(f"- For mobility: {', '.join(MOBILITY_EXPERT.resources)}")
    return "\n".join(lines)


def _build_patient_data(muscle_labels: Sequence[str], pain_point_count: int, form: FormData) -> str:
    fields: list[tuple[str, str]] = [
        ("Affected Areas", ", ".join(muscle_labels)),
        ("Pain Level", f"{form.pain_level}/10"),
        ("Concern Level", f"{form.concern_level}/10" if form.concern_level is not None else ""),
        ("Pain Types", ", ".join(form.pain_types)),
        ("Frequency", form.frequency),
        ("Duration", form.duration),
        ("Possible Causes", ", ".join(form.causes)),
        ("Activities", ", ".join(form.activities)),
        ("Activity Intensity", form.intensity),
        ("Patient Goals", form.goals),
        ("Concern Reason", form.concern_reason),
        ("Number of pain points marked", str(pain_point_count)),
    ]
    lines = ["PATIENT ASSESSMENT DATA:", ""]
    lines.extend(f"{label}: {value}" for label, value in fields if value.strip())

    narratives = [
        ("THEIR STORY (important - reference this specifically)", form.story),
        ("WHAT TRIGGERS/RELIEVES IT", form.triggers_and_relief),
        ("WHAT THEY'VE TRIED", form.tried_so_far),
        ("HOW IT'S BEEN PROGRESSING", form.progress),
    ]
    for heading, text in narratives:
        if text.strip():
            lines.append("")
            lines.append(f"{heading}:")
            lines.append(f'"""{text.strip()}"""')
    return "\n".join(lines)


def build_analysis_prompt(muscle_labels: Sequence[str], pain_point_count: int, form_data: FormData) -> str:
    hint = urgency_hint(form_data.pain_level)

    closing = f"""Generate a comprehensive, EMPATHETIC analysis. Remember:
- The summary must reference their specific story and make them feel heard
- Use "{hint}" as the urgency level
- For reassurance title, use "{reassurance_title(hint)}"
- Include specific expert resources from the knowledge provided above
- Recovery principles should explain the "why", not just list exercises
- Be warm, be human, be hopeful

Respond ONLY with valid JSON matching this schema:
{RESPONSE_SCHEMA_DESCRIPTION}"""

    blocks = [
        SYSTEM_CONTEXT,
        EMPATHY_GUIDELINES,
        PAIN_SCIENCE_CONTEXT,
        _build_expert_context(muscle_labels),
        _build_resources_context(muscle_labels),
        "---",
        _build_patient_data(muscle_labels, pain_point_count, form_data),
        "---",
        closing,
    ]
    return "\n\n".join(b for b in blocks if b)


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


def _chronological(entries: Sequence[RecentEntry]) -> list[RecentEntry]:
    # Entries without a timestamp keep their given position after dated ones.
    dated = [e for e in entries if e.created_at is not None]
    undated = [e for e in entries if e.created_at is None]
    return sorted(dated, key=lambda e: e.created_at) + undated  # type: ignore[arg-type, return-value]


def pain_trend(levels: Sequence[int]) -> Trend:
    """Compare the earlier and later halves of the last ten pain levels (oldest first)."""
    recent = list(levels)[-TREND_WINDOW:]
    if len(recent) < 2:
        return "stable"
    split = len(recent) // 2
    earlier, later = _mean(recent[:split]), _mean(recent[split:])
    if later <= earlier - TREND_THRESHOLD:
        return "improving"
    if later >= earlier + TREND_THRESHOLD:
        return "worsening"
    return "stable"


def _format_date(dt: datetime | None) -> str:
    return dt.strftime("%Y-%m-%d") if dt else "date unknown"


def _assessment_context(assessment: DiaryAssessmentContext) -> str:
    story = assessment.story.strip()[:STORY_EXCERPT_CHARS] or "Not provided"
    insight = assessment.reassurance_message.strip()[:STORY_EXCERPT_CHARS] or "Focus on gradual, consistent progress"
    pain = f"{assessment.pain_level}/10" if assessment.pain_level else "N/A"
    return f"""CONTEXT FROM THEIR ASSESSMENT ({_format_date(assessment.created_at)}):
- Body part: {", ".join(assessment.selected_muscles) or "Not specified"}
- Initial pain level: {pain}
- Goals: {assessment.goals or "Not specified"}
- What helps / triggers: {assessment.triggers_and_relief or "Not specified"}
- Their story: {story}
- Key insight from analysis: {insight}"""


def _primary_body_part(assessment: DiaryAssessmentContext) -> str:
    return assessment.selected_muscles[0] if assessment.selected_muscles else "affected area"


DIARY_BOUNDARIES = """BOUNDARIES (handle with care, not dismissiveness):
- Physical pain focus: if they mention emotional struggles or distress, acknowledge it warmly and connect how it relates to their physical recovery
- Medication or diagnosis questions: offer educated context only, and make clear these are for their physio or doctor to decide: "That's definitely worth discussing with your doctor - they can assess..."
- Urgent concerns: if they describe new, severe, or worrying symptoms (numbness, loss of strength, fever, night pain, loss of bladder/bowel control), tell them clearly to get checked by a doctor soon - better safe than sorry"""


def build_diary_prompt(
    entry_type: str,
    entry_text: str,
    pain_level: int | None,
    assessment: DiaryAssessmentContext,
    recent_entries: Sequence[RecentEntry],
) -> str:
    ordered = _chronological(recent_entries)[-TREND_WINDOW:]
    levels = [e.pain_level for e in ordered if e.pain_level is not None]
    avg_pain = f"{_mean(levels):.1f}/10" if levels else "N/A"
    types = ", ".join(e.entry_type for e in ordered) or "none yet"

    return f"""You are a compassionate, expert recovery coach helping someone with their {_primary_body_part(assessment)} pain. You have deep knowledge of pain science, physiotherapy, and rehabilitation - and you genuinely care about this person's wellbeing.

YOUR ROLE:
- Be like a wise, warm friend who truly understands pain and recovery
- ANSWER EVERY QUESTION they ask - don't skip or give partial responses
- Reference their specific story, goals, and what has helped them before
- Provide substantive, helpful guidance (not just brief acknowledgments)

EXPERT KNOWLEDGE TO DRAW FROM:
- Pain science (Prof. Lorimer Moseley): Pain is protection, not damage. Understanding pain reduces it. Recovery has many pathways.
- Movement principles (Dr. Stuart McGill, Dr. Kelly Starrett): spine hygiene, movement quality, gradual loading
- Recovery mindset: progress isn't linear. Setbacks are normal. Consistency beats intensity.

REASONING APPROACH:
- When they describe pain with a specific movement, consider which structure(s) might be involved and explain the biomechanical "why"
- Use hedged but specific language: "This sounds like it could be...", "The pattern suggests..."
- Always caveat: "...but worth confirming with your physio/doctor if it persists"

{_assessment_context(assessment)}

RECENT DIARY TREND (last {len(ordered)} entries):
- Average pain: {avg_pain}
- Trend: {pain_trend(levels)}
- Entry types: {types}

TODAY'S ENTRY:
- Type: {entry_type}
- Pain level: {f"{pain_level}/10" if pain_level else "Not specified"}
- Entry: "{entry_text.strip()}"

RESPONSE GUIDELINES:
1. Answer all questions specifically
2. Be warm and conversational
3. Reference their body part, goals, and what helps them
4. For PAIN entries: pattern-match what might be irritated and why, then normalize, reassure, and remind them what helps
5. For WORKOUT questions: give specific guidance based on their triggers and safe activities
6. For PROGRESSION: celebrate wins, acknowledge struggles, encourage sustainable pacing
7. Aim for 250-450 words

{DIARY_BOUNDARIES}

Respond naturally, warmly, and helpfully in plain text (no JSON, no markdown formatting)."""


def build_follow_up_prompt(
    entry_type: str,
    entry_text: str,
    ai_response: str | None,
    question: str,
    assessment: DiaryAssessmentContext,
) -> str:
    previous = ai_response.strip() if ai_response else "No earlier reply."
    return f"""You are the same compassionate recovery coach continuing a conversation about their {_primary_body_part(assessment)} pain.

{_assessment_context(assessment)}

THEIR ORIGINAL DIARY ENTRY ({entry_type}):
"{entry_text.strip()}"

YOUR EARLIER REPLY:
"{previous}"

THEIR FOLLOW-UP QUESTION:
"{question.strip()}"

Answer the follow-up directly in 120-250 words, staying consistent with your earlier reply.

{DIARY_BOUNDARIES}

Respond in plain text (no JSON, no markdown formatting)."""


def build_insights_prompt(entries: Sequence[RecentEntry], assessment: DiaryAssessmentContext) -> str:
    ordered = _chronological(entries)
    dated = [e.created_at for e in ordered if e.created_at is not None]
    if dated:
        oldest, newest = dated[0], dated[-1]
        date_range = f"{_format_date(oldest)} - {_format_date(newest)}"
        span_days = (newest - oldest).days
    else:
        oldest = None
        date_range = "dates unknown"
        span_days = 0

    summaries = []
    for i, e in enumerate(ordered, start=1):
        day = f"Day {(e.created_at - oldest).days}, " if e.created_at and oldest else ""
        summaries.append(
            f"""Entry {i} ({day}{_format_date(e.created_at)}):
- Type: {e.entry_type}
- Pain level: {e.pain_level or "Not specified"}
- Note: "{e.entry_text.strip()}\""""
        )
    entries_block = "\n\n".join(summaries)

    return f"""You are a compassionate recovery coach analyzing a user's diary entries to provide insights about their {_primary_body_part(assessment)} pain recovery journey.

TIME AWARENESS:
- These {len(ordered)} entries span {span_days} days ({date_range})
- Consider entry frequency: infrequent logging and daily logging tell different stories
- Pay attention to time gaps

{_assessment_context(assessment)}

DIARY ENTRIES TO ANALYZE:
{entries_block}

YOUR TASK:
Generate exactly 5 key insights about their recovery journey. They should be specific to their entries, pattern-based, date-aware, actionable where relevant, and encouraging.

Return ONLY a JSON object with this exact structure:
{{
  "dateRange": "{date_range}",
  "entryCount": {len(ordered)},
  "timeSpanDays": {span_days},
  "insights": [
    {{
      "title": "Brief insight title (3-5 words)",
      "description": "1-2 sentences referencing their actual entries.",
      "category": "trend" | "correlation" | "progress" | "suggestion"
    }}
  ]
}}"""
