"""Curated expert knowledge used to ground the analysis prompt.

Each body region carries the experts we recommend and the recovery principles
they are known for. Lookups match free-text area labels ("Left Lower Back",
"Right Hamstring") against region keywords by case-insensitive substring.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Expert:
    name: str
    credentials: str
    institution: str
    specialty: str
    key_work: str
    why_recommended: str
    resources: tuple[str, ...] = ()


@dataclass(frozen=True)
class BodyRegion:
    key: str
    expert_keywords: tuple[str, ...]
    # Narrower on purpose: "quad" pulls in knee experts but not knee principles.
    principle_keywords: tuple[str, ...]
    experts: tuple[Expert, ...]
    key_principles: tuple[str, ...] = field(default_factory=tuple)


MAX_PRINCIPLES = 5

REGIONS: tuple[BodyRegion, ...] = (
    BodyRegion(
        key="back",
        expert_keywords=("back", "spine", "lumbar", "erector"),
        principle_keywords=("back", "spine", "lumbar"),
        experts=(
            Expert(
                name="Dr. Stuart McGill",
                credentials="PhD, Professor Emeritus",
                institution="University of Waterloo",
                specialty="Spine biomechanics, injury prevention, rehabilitation",
                key_work="Back Mechanic, Ultimate Back Fitness and Performance",
                why_recommended=(
                    "30+ years researching spine mechanics. His \"McGill Big 3\" exercises are evidence-based "
                    "core stabilizers. Treats professional athletes and everyday people alike."
                ),
                resources=("Back Mechanic (book)", "backfitpro.com"),
            ),
        ),
        key_principles=(
            "Spine sparing strategies - avoid repeated flexion under load",
            "Core stiffness over core strength - brace, don't hollow",
            "Hip hinging - use hips, not spine, for bending",
            "Progressive loading after initial rest period",
            "Movement variability - avoid prolonged static positions",
        ),
    ),
    BodyRegion(
        key="knee",
        expert_keywords=("knee", "quad", "patella", "hamstring"),
        principle_keywords=("knee", "patella"),
        experts=(
            Expert(
                name="Dr. Robert LaPrade",
                credentials="MD, PhD",
                institution="Twin Cities Orthopedics, University of Minnesota",
                specialty="Complex knee injuries, ligament reconstruction, biomechanics",
                key_work="525+ peer-reviewed papers, Evidence-Based Management of Complex Knee Injuries",
                why_recommended=(
                    "His research on posterolateral corner and multi-ligament injuries is foundational. "
                    "Treats elite athletes but the principles apply broadly."
                ),
                resources=("drrobertlaprademd.com", "The Knee Injury Bible"),
            ),
        ),
        key_principles=(
            "Load management - gradual progression of running/jumping",
            "Hip strengthening - glute medius is critical for knee tracking",
            "Eccentric loading - especially for tendinopathies",
            "Don't ignore the ankle - mobility affects knee mechanics",
            "Single-leg stability work before return to sport",
        ),
    ),
    BodyRegion(
        key="shoulder",
        expert_keywords=("shoulder", "rotator", "delt", "trap"),
        principle_keywords=("shoulder", "rotator"),
        experts=(
            Expert(
                name="Dr. Jay Keener",
                credentials="MD",
                institution="Washington University School of Medicine",
                specialty="Rotator cuff disease, shoulder arthroscopy",
                key_work="15+ years of prospective studies on rotator cuff natural history",
                why_recommended=(
                    "Showed that many rotator cuff tears can be managed conservatively. "
                    "His work helps patients avoid unnecessary surgery."
                ),
                resources=("ortho.wustl.edu",),
            ),
        ),
        key_principles=(
            "Scapular control before rotator cuff - the foundation matters",
            "Thoracic mobility - stiff upper back overloads shoulder",
            "Gradual return to overhead - progressive loading",
            "Relative rest, not complete rest - movement helps healing",
            "Address posture - forward head/rounded shoulders contribute",
        ),
    ),
    BodyRegion(
        key="hip",
        expert_keywords=("hip", "glute", "piriformis", "flexor"),
        principle_keywords=("hip", "glute"),
        experts=(
            Expert(
                name="Dr. Marc Philippon",
                credentials="MD",
                institution="Steadman Clinic, Steadman Philippon Research Institute",
                specialty="Hip arthroscopy, FAI, labral tears, joint preservation",
                key_work="Pioneer of hip arthroscopy, 10+ year outcome studies on FAI treatment",
                why_recommended=(
                    "Treats professional and Olympic athletes, and his research on conservative vs surgical "
                    "management helps all patients make informed decisions."
                ),
                resources=("thesteadmanclinic.com", "sprivail.org"),
            ),
        ),
        key_principles=(
            "Hip mobility before hip strength - restore range first",
            "Avoid deep end-range loading initially - modify squat depth",
            "Glute activation - posterior chain balance is critical",
            "Address sitting habits - breaks and position changes",
            "Core-hip connection - proximal stability for distal mobility",
        ),
    ),
    BodyRegion(
        key="ankle_foot",
        expert_keywords=("ankle", "achilles", "calf", "foot", "plantar"),
        principle_keywords=("ankle", "achilles", "calf"),
        experts=(
            Expert(
                name="Prof. Jill Cook",
                credentials="PhD",
                institution="La Trobe University, Australia",
                specialty="Tendinopathy, Achilles, patellar tendon, progressive loading",
                key_work="Tendon continuum model, 325+ publications on tendon rehabilitation",
                why_recommended=(
                    "The world's leading tendon researcher. Her progressive loading protocols moved treatment "
                    "away from rest toward structured loading."
                ),
                resources=("sportsmap.com.au", "Research publications via La Trobe"),
            ),
        ),
        key_principles=(
            "Progressive loading is treatment - tendons need load to heal",
            "Isometrics for pain relief - heavy holds reduce pain",
            "Avoid compression at insertion - modify stretching",
            "Calf strength is key - heel raises with progressive load",
            "Patience required - tendons heal slowly (3-6 months typical)",
        ),
    ),
    BodyRegion(
        key="elbow_wrist",
        expert_keywords=("elbow", "wrist", "forearm"),
        principle_keywords=("elbow", "wrist"),
        experts=(
            Expert(
                name="Bisset/Coombes Research Group",
                credentials="PhD researchers",
                institution="Various (Australia, UK)",
                specialty="Tennis elbow, lateral epicondylitis evidence-based treatment",
                key_work="Cochrane reviews, RCTs on exercise therapy for elbow tendinopathy",
                why_recommended=(
                    "Their trials showed exercise therapy outperforms corticosteroid injections long-term "
                    "and changed clinical practice worldwide."
                ),
                resources=("Cochrane Database reviews", "BJSM publications"),
            ),
        ),
        key_principles=(
            "Eccentric loading - Tyler Twist / FlexBar protocols",
            "Avoid repeated steroid injections - worse long-term outcomes",
            "Activity modification - palm-up lifting reduces strain",
            "Gradual return - 70-90% resolve in 12 months with patience",
            "Grip strength maintenance - don't completely rest",
        ),
    ),
)

PAIN_SCIENCE_EXPERT = Expert(
    name="Prof. Lorimer Moseley",
    credentials="AO, PhD",
    institution="University of South Australia",
    specialty="Pain neuroscience, chronic pain, bioplasticity",
    key_work="Explain Pain, Painful Yarns, Pain Revolution",
    why_recommended="His work shows that understanding pain actually reduces pain.",
    resources=("Tame the Beast (free video at tamethebeast.org)", "Explain Pain (book)", "Pain Matters Podcast"),
)

MOBILITY_EXPERT = Expert(
    name="Dr. Kelly Starrett",
    credentials="DPT",
    institution="The Ready State (founder)",
    specialty="Mobility, movement mechanics, pain-free performance",
    key_work="Becoming a Supple Leopard, Built to Move",
    why_recommended="Translated mobility work into short, accessible daily routines.",
    resources=("thereadystate.com", "Becoming a Supple Leopard (book)"),
)


def _matches(labels: Sequence[str], keywords: Iterable[str]) -> bool:
    lowered = [label.lower() for label in labels]
    return any(kw in label for kw in keywords for label in lowered)


def get_experts_for_areas(labels: Sequence[str]) -> list[Expert]:
    experts: list[Expert] = []
    seen: set[str] = set()
    for region in REGIONS:
        if not _matches(labels, region.expert_keywords):
            continue
        for expert in region.experts:
            if expert.name not in seen:
                experts.append(expert)
                seen.add(expert.name)
    return experts


def get_principles_for_areas(labels: Sequence[str]) -> list[str]:
    principles: list[str] = []
    for region in REGIONS:
        if _matches(labels, region.principle_keywords):
            principles.extend(region.key_principles)
    return list(dict.fromkeys(principles))[:MAX_PRINCIPLES]
