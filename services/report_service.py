from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import (
    Flowable,
    HRFlowable,
    ListFlowable,
    ListItem,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from schemas.analysis import AnalysisResult
from schemas.assessment import AssessmentCreate, FormData, PainPoint

REPORT_TITLE = "Body Pain Assessment Report"
PAGE_MARGIN = 40
# Frame padding is 6pt per side.
CONTENT_WIDTH = A4[0] - 2 * PAGE_MARGIN - 12
DISCLAIMER = (
    "DISCLAIMER: This report is for informational purposes only and is not a substitute for professional "
    "medical advice, diagnosis, or treatment. Always seek the advice of your physician or other qualified "
    "health provider with any questions you may have regarding a medical condition."
)

MUSCLE_NAMES = {
    "head": "Head",
    "neck": "Neck",
    "leftDeltoid": "Left Deltoid (Shoulder)",
    "rightDeltoid": "Right Deltoid (Shoulder)",
    "leftPec": "Left Pectoral (Chest)",
    "rightPec": "Right Pectoral (Chest)",
    "chest": "Chest",
    "leftBicep": "Left Bicep",
    "rightBicep": "Right Bicep",
    "leftForearm": "Left Forearm",
    "rightForearm": "Right Forearm",
    "leftHand": "Left Hand",
    "rightHand": "Right Hand",
    "upperAbs": "Upper Abdominals",
    "lowerAbs": "Lower Abdominals",
    "leftObliques": "Left Obliques",
    "rightObliques": "Right Obliques",
    "groin": "Groin",
    "leftAdductor": "Left Adductor (Inner Thigh)",
    "rightAdductor": "Right Adductor (Inner Thigh)",
    "leftQuad": "Left Quadriceps",
    "rightQuad": "Right Quadriceps",
    "leftKnee": "Left Knee",
    "rightKnee": "Right Knee",
    "leftShin": "Left Shin",
    "rightShin": "Right Shin",
    "leftAnkle": "Left Ankle",
    "rightAnkle": "Right Ankle",
    "leftFoot": "Left Foot",
    "rightFoot": "Right Foot",
    "leftTrap": "Left Trapezius",
    "rightTrap": "Right Trapezius",
    "upperBack": "Upper Back",
    "leftLat": "Left Latissimus",
    "rightLat": "Right Latissimus",
    "midBack": "Mid Back",
    "lowerBack": "Lower Back",
    "leftGlute": "Left Gluteus",
    "rightGlute": "Right Gluteus",
    "leftHamstring": "Left Hamstring",
    "rightHamstring": "Right Hamstring",
    "leftCalf": "Left Calf",
    "rightCalf": "Right Calf",
    "leftAchilles": "Left Achilles",
    "rightAchilles": "Right Achilles",
    "leftHeel": "Left Heel",
    "rightHeel": "Right Heel",
}

# First match wins.
ZONE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Head/Neck", ("head", "neck")),
    ("Shoulders", ("deltoid", "trap")),
    ("Chest", ("pec", "chest")),
    ("Arms", ("bicep", "forearm", "hand")),
    ("Core", ("abs", "oblique", "groin")),
    ("Back", ("back", "lat")),
    ("Hips/Thighs", ("glute", "hamstring", "quad", "adductor")),
    ("Lower Legs", ("knee", "shin", "calf")),
    ("Feet/Ankles", ("ankle", "foot", "heel", "achilles")),
]

# Diagram y thresholds (diagram-space units) for painted points.
VERTICAL_ZONES: list[tuple[float, str]] = [
    (120, "Head/Neck"),
    (200, "Upper Body"),
    (350, "Torso"),
    (500, "Upper Legs"),
    (630, "Lower Legs"),
]

URGENCY_BANNERS = {
    "high": ("Priority Attention Required", "#dc2626", "#fef2f2", "#fecaca"),
    "moderate": ("Moderate Attention Needed", "#d97706", "#fffbeb", "#fde68a"),
    "low": ("Low Concern Level", "#16a34a", "#f0fdf4", "#bbf7d0"),
}
URGENCY_MESSAGES = {
    "high": "Based on what you described, please have this checked by a healthcare professional soon.",
    "moderate": "Keep an eye on how this develops and see a physiotherapist or doctor if it is not improving.",
    "low": "This looks manageable with sensible self-care and a gradual return to activity.",
}


# Report content model. Sections are assembled first, then drawn.
@dataclass
class FieldBlock:
    label: str
    value: str


@dataclass
class ParagraphBlock:
    title: str
    text: str


@dataclass
class ListBlock:
    title: str
    items: list[str]


@dataclass
class LevelBlock:
    text: str
    color: str


@dataclass
class BannerBlock:
    title: str
    message: str
    urgency: str


@dataclass
class CardBlock:
    title: str
    subtitle: str
    body: str
    accent: str = "#e5e7eb"
    fill: str | None = None


@dataclass
class ReportSection:
    key: str
    title: str
    blocks: list = field(default_factory=list)

    def labels(self) -> list[str]:
        return [b.label for b in self.blocks if isinstance(b, FieldBlock)]

    def titles(self) -> list[str]:
        return [b.title for b in self.blocks if isinstance(b, (ParagraphBlock, ListBlock, CardBlock))]


def muscle_display_name(key: str) -> str:
    if key in MUSCLE_NAMES:
        return MUSCLE_NAMES[key]
    return " ".join(part.capitalize() for part in key.replace("-", " ").split())


def muscle_zone(key: str) -> str:
    lowered = key.lower()
    for zone, keywords in ZONE_KEYWORDS:
        if any(kw in lowered for kw in keywords):
            return zone
    return "Other"


def vertical_zone(y: float) -> str:
    for limit, zone in VERTICAL_ZONES:
        if y < limit:
            return zone
    return "Feet"


def pain_level_color(level: int) -> str:
    if level <= 3:
        return "#22c55e"
    if level <= 6:
        return "#eab308"
    return "#ef4444"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def _points_summary(view: str, points: list[PainPoint]) -> str:
    zones = list(dict.fromkeys(vertical_zone(p.y) for p in points))
    return f"{view} View: {_plural(len(points), 'point')} - {', '.join(zones)}"


def _pain_locations(selected: list[str], points: list[PainPoint]) -> ReportSection | None:
    if not selected and not points:
        return None
    section = ReportSection(key="pain_locations", title="Pain Locations")

    if selected:
        grouped: dict[str, list[str]] = {}
        for key in selected:
            grouped.setdefault(muscle_zone(key), []).append(muscle_display_name(key))
        section.blocks.append(
            ListBlock(
                title=f"Affected Muscle Groups ({_plural(len(selected), 'area')})",
                items=[f"{zone}: {', '.join(names)}" for zone, names in grouped.items()],
            )
        )

    if points:
        summaries = []
        for view in ("Front", "Back"):
            view_points = [p for p in points if p.view == view]
            if view_points:
                summaries.append(_points_summary(view, view_points))
        section.blocks.append(ListBlock(title=f"Marked Pain Points ({len(points)} total)", items=summaries))
    return section


def _pain_details(form: FormData) -> ReportSection:
    section = ReportSection(key="pain_details", title="Pain Assessment Details")
    section.blocks.append(LevelBlock(text=f"Pain Level: {form.pain_level}/10", color=pain_level_color(form.pain_level)))
    fields = [
        ("Pain Characteristics", ", ".join(form.pain_types)),
        ("Frequency", form.frequency),
        ("Duration", form.duration),
        ("Potential Causes", ", ".join(form.causes)),
        ("Pain Story", form.story),
        ("Progress Over Time", form.progress),
        ("Triggers & Relief", form.triggers_and_relief),
        ("Treatments Tried", form.tried_so_far),
    ]
    section.blocks.extend(FieldBlock(label, value.strip()) for label, value in fields if value.strip())
    return section


def _activity_goals(form: FormData) -> ReportSection | None:
    fields = [
        ("Activities", ", ".join(form.activities)),
        ("Activity Intensity", form.intensity),
        ("Goals", form.goals),
    ]
    blocks = [FieldBlock(label, value.strip()) for label, value in fields if value.strip()]
    if not blocks:
        return None
    return ReportSection(key="activity_goals", title="Activity & Goals", blocks=blocks)


def _concern(form: FormData) -> ReportSection | None:
    if form.concern_level is None and not form.concern_reason.strip():
        return None
    section = ReportSection(key="concern", title="Level of Concern")
    if form.concern_level is not None:
        section.blocks.append(FieldBlock("Concern Level", f"{form.concern_level}/10"))
    if form.concern_reason.strip():
        section.blocks.append(FieldBlock("Reason for Concern", form.concern_reason.strip()))
    return section


def _analysis(analysis: AnalysisResult) -> ReportSection:
    section = ReportSection(key="analysis", title="Analysis & Recommendations")
    section.blocks.append(
        BannerBlock(
            title=URGENCY_BANNERS[analysis.urgency][0],
            message=URGENCY_MESSAGES[analysis.urgency],
            urgency=analysis.urgency,
        )
    )

    if analysis.summary:
        section.blocks.append(ParagraphBlock("Summary", analysis.summary))
    if analysis.understanding_whats_happening:
        section.blocks.append(ParagraphBlock("Understanding What's Happening", analysis.understanding_whats_happening))
    if analysis.reassurance.message:
        section.blocks.append(ParagraphBlock(analysis.reassurance.title, analysis.reassurance.message))

    if analysis.possible_conditions:
        section.blocks.append(ParagraphBlock("Possible Conditions", ""))
        section.blocks.extend(
            CardBlock(title=c.name, subtitle=f"({c.likelihood})", body=c.description) for c in analysis.possible_conditions
        )

    for title, items in (
        ("Watch For", analysis.watch_for),
        ("Things to Avoid", analysis.avoid),
        ("Safe to Try", analysis.safe_to_try),
        ("Recovery Principles", analysis.recovery_principles),
    ):
        if items:
            section.blocks.append(ListBlock(title, list(items)))

    if analysis.timeline:
        section.blocks.append(ParagraphBlock("Expected Timeline", analysis.timeline))

    if analysis.resources:
        section.blocks.append(ParagraphBlock("Recommended Resources", ""))
        section.blocks.extend(
            CardBlock(title=r.name, subtitle=r.type, body=r.why, accent="#dbeafe", fill="#eff6ff")
            for r in analysis.resources
        )
    return section


def build_report_sections(assessment: AssessmentCreate, analysis: AnalysisResult | None) -> list[ReportSection]:
    form = assessment.form_data
    candidates = [
        _pain_locations(assessment.selected_muscles, assessment.pain_points),
        _pain_details(form),
        _activity_goals(form),
        _concern(form),
        _analysis(analysis) if analysis else None,
    ]
    return [s for s in candidates if s is not None]


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()["Normal"]
    return {
        "header": ParagraphStyle("header", parent=base, fontName="Helvetica-Bold", fontSize=22, leading=26, spaceAfter=6),
        "date": ParagraphStyle("date", parent=base, fontSize=10, textColor=colors.HexColor("#6b7280"), spaceAfter=12),
        "subheader": ParagraphStyle(
            "subheader", parent=base, fontName="Helvetica-Bold", fontSize=14, leading=18, spaceBefore=14, spaceAfter=6
        ),
        "section": ParagraphStyle(
            "section",
            parent=base,
            fontName="Helvetica-Bold",
            fontSize=12,
            textColor=colors.HexColor("#2563eb"),
            spaceBefore=10,
            spaceAfter=4,
        ),
        "label": ParagraphStyle(
            "label", parent=base, fontName="Helvetica-Bold", fontSize=10, textColor=colors.HexColor("#666666"), spaceBefore=4
        ),
        "value": ParagraphStyle("value", parent=base, fontSize=10, leading=13, spaceAfter=6, alignment=TA_LEFT),
        "small": ParagraphStyle("small", parent=base, fontSize=9, leading=12, textColor=colors.HexColor("#4b5563")),
        "card_title": ParagraphStyle("card_title", parent=base, fontName="Helvetica-Bold", fontSize=10),
        "disclaimer": ParagraphStyle(
            "disclaimer",
            parent=base,
            fontName="Helvetica-Oblique",
            fontSize=8,
            leading=10,
            textColor=colors.HexColor("#888888"),
            spaceBefore=20,
        ),
    }


def _p(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text), style)


def _boxed(content: list[Flowable], border: str, fill: str | None = None) -> Table:
    table = Table([[content]], colWidths=[CONTENT_WIDTH])
    commands = [
        ("BOX", (0, 0), (-1, -1), 1, colors.HexColor(border)),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
        ("RIGHTPADDING", (0, 0), (-1, -1), 8),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]
    if fill:
        commands.append(("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(fill)))
    table.setStyle(TableStyle(commands))
    return table


def _render_block(block, st: dict[str, ParagraphStyle]) -> list[Flowable]:
    if isinstance(block, FieldBlock):
        return [_p(block.label, st["label"]), _p(block.value, st["value"])]
    if isinstance(block, ParagraphBlock):
        out: list[Flowable] = [_p(block.title, st["section"])]
        if block.text:
            out.append(_p(block.text, st["value"]))
        return out
    if isinstance(block, ListBlock):
        items = [ListItem(_p(item, st["value"]), leftIndent=12) for item in block.items]
        return [_p(block.title, st["label"]), ListFlowable(items, bulletType="bullet", start="•", leftIndent=12)]
    if isinstance(block, LevelBlock):
        level_style = ParagraphStyle("level", parent=st["card_title"], fontSize=11, textColor=colors.HexColor(block.color))
        return [_boxed([_p(block.text, level_style)], "#e5e7eb"), Spacer(1, 6)]
    if isinstance(block, BannerBlock):
        _, text_color, fill, border = URGENCY_BANNERS[block.urgency]
        title_style = ParagraphStyle("banner", parent=st["card_title"], fontSize=11, textColor=colors.HexColor(text_color))
        content: list[Flowable] = [_p(block.title, title_style)]
        if block.message:
            content.append(_p(block.message, st["small"]))
        return [_boxed(content, border, fill), Spacer(1, 8)]
    if isinstance(block, CardBlock):
        content = [_p(f"{block.title} {block.subtitle}".strip(), st["card_title"])]
        if block.body:
            content.append(_p(block.body, st["small"]))
        return [_boxed(content, block.accent, block.fill), Spacer(1, 4)]
    raise TypeError(f"Unknown report block: {type(block).__name__}")


def render_assessment_pdf(assessment: AssessmentCreate, analysis: AnalysisResult | None = None) -> bytes:
    st = _styles()
    generated = assessment.created_at or datetime.now()

    story: list[Flowable] = [
        _p(REPORT_TITLE, st["header"]),
        _p(f"Generated on {generated.strftime('%B %d, %Y at %I:%M %p')}", st["date"]),
        HRFlowable(width="100%", thickness=1, color=colors.HexColor("#e5e7eb"), spaceAfter=10),
    ]
    for section in build_report_sections(assessment, analysis):
        story.append(_p(section.title, st["subheader"]))
        for block in section.blocks:
            story.extend(_render_block(block, st))
    story.append(_p(DISCLAIMER, st["disclaimer"]))

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=REPORT_TITLE,
        author="PainCompass",
        subject="Pain Assessment Report",
    )
    doc.build(story)
    return buf.getvalue()


def pdf_filename(when: datetime | None = None) -> str:
    return f"pain-assessment-{(when or datetime.now()).strftime('%Y-%m-%d')}.pdf"
