from services.expert_knowledge import MAX_PRINCIPLES, get_experts_for_areas, get_principles_for_areas


def _names(labels):
    return [e.name for e in get_experts_for_areas(labels)]


def test_lower_back_gets_spine_expert_only():
    names = _names(["Left Lower Back"])
    assert names == ["Dr. Stuart McGill"]
    assert "Prof. Jill Cook" not in names


def test_unmatched_area_returns_nothing():
    assert get_experts_for_areas(["Head"]) == []
    assert get_principles_for_areas(["Head"]) == []


def test_matching_is_case_insensitive():
    assert _names(["RIGHT KNEE"]) == ["Dr. Robert LaPrade"]


def test_experts_follow_region_order_without_duplicates():
    names = _names(["Right Calf", "Lower Back", "Left Knee", "Right Knee"])
    assert names == ["Dr. Stuart McGill", "Dr. Robert LaPrade", "Prof. Jill Cook"]


def test_principles_capped_and_unique():
    principles = get_principles_for_areas(["Lower Back", "Left Knee", "Right Hip", "Left Ankle"])
    assert len(principles) == MAX_PRINCIPLES
    assert len(set(principles)) == len(principles)


def test_hamstring_matches_knee_expert_but_not_knee_principles():
    assert _names(["Left Hamstring"]) == ["Dr. Robert LaPrade"]
    assert get_principles_for_areas(["Left Hamstring"]) == []
