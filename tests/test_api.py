from services.errors import ProviderError

ANALYZE = "/api/analyze"


def _analyze_body(form_data, labels=("Right Knee",)):
    return {"selectedAreaLabels": list(labels), "painPointCount": 1, "formData": form_data}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_returns_camel_case_result(client, form_data):
    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 200
    body = r.json()
    assert body["urgency"] == "high"
    assert "understandingWhatsHappening" in body
    assert body["reassurance"]["title"] == "A Silver Lining"


def test_analyze_rate_limited_after_burst(client, form_data):
    assert client.post(ANALYZE, json=_analyze_body(form_data)).status_code == 200
    assert client.post(ANALYZE, json=_analyze_body(form_data)).status_code == 200

    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 429
    body = r.json()
    assert body["message"].startswith("Too many requests.")
    assert 1 <= body["retryAfterSeconds"] <= 60
    assert r.headers["Retry-After"] == str(body["retryAfterSeconds"])


def test_daily_limit_over_http(client, clock, form_data):
    for _ in range(15):
        assert client.post(ANALYZE, json=_analyze_body(form_data)).status_code == 200
        assert client.post(ANALYZE, json=_analyze_body(form_data)).status_code == 200
        clock.advance(61)

    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 429
    assert r.json()["retryAfterSeconds"] == 24 * 60 * 60 - 15 * 61


def test_analyze_rejects_missing_areas(client, form_data):
    r = client.post(ANALYZE, json={"selectedAreaLabels": [], "formData": form_data})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid request data"
    assert body["details"]


def test_analyze_unparseable_reply_is_500(client, fake_llm, form_data):
    fake_llm.reply = "I could not produce an analysis."
    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 500
    assert "message" in r.json()


def test_provider_rate_limit_maps_to_429(client, fake_llm, form_data):
    fake_llm.error = ProviderError("busy", status=429, retryable=True, retry_after_seconds=30)
    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 429
    assert r.json() == {"message": "busy", "retryable": True, "retryAfterSeconds": 30}


def test_provider_outage_maps_to_500(client, fake_llm, form_data):
    fake_llm.error = ProviderError("down", status=503, retryable=True)
    r = client.post(ANALYZE, json=_analyze_body(form_data))
    assert r.status_code == 500
    assert r.json()["retryable"] is True


def test_diary_ai_feedback(client, fake_llm):
    fake_llm.reply = "Lovely progress this week."
    r = client.post(
        "/api/diary/ai-feedback",
        json={"entryType": "progression", "entryText": "Walked 5k", "assessment": {"selectedMuscles": ["Left Knee"]}},
    )
    assert r.status_code == 200
    assert r.json() == {"feedback": "Lovely progress this week."}


def test_export_pdf(client, form_data):
    r = client.post("/api/export-pdf", json={"selectedMuscles": ["leftKnee"], "formData": form_data})
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert "pain-assessment-" in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")


def _create_assessment(client, form_data):
    r = client.post(
        "/api/assessments",
        json={"selectedMuscles": ["leftKnee"], "painPoints": [{"x": 10, "y": 520, "view": "Front"}], "formData": form_data},
    )
    assert r.status_code == 201
    return r.json()


def test_assessment_crud(client, form_data):
    created = _create_assessment(client, form_data)
    aid = created["id"]
    assert created["formData"]["painLevel"] == 8

    listed = client.get("/api/assessments").json()["assessments"]
    assert [a["id"] for a in listed] == [aid]

    assert client.get(f"/api/assessments/{aid}").json()["selectedMuscles"] == ["leftKnee"]

    export = client.get(f"/api/assessments/{aid}/export.json").json()
    assert export["assessment"]["id"] == aid

    pdf = client.get(f"/api/assessments/{aid}/pdf")
    assert pdf.content.startswith(b"%PDF")

    assert client.delete(f"/api/assessments/{aid}").status_code == 204
    assert client.get(f"/api/assessments/{aid}").status_code == 404


def test_diary_entry_saved_even_when_feedback_fails(client, fake_llm, form_data):
    aid = _create_assessment(client, form_data)["id"]
    fake_llm.error = ProviderError("down", status=503, retryable=True)

    r = client.post(
        f"/api/assessments/{aid}/diary",
        json={"entryType": "pain", "entryText": "Sore after stairs", "painLevel": 6, "requestAiFeedback": True},
    )
    assert r.status_code == 201
    assert r.json()["aiResponse"] is None

    entries = client.get(f"/api/assessments/{aid}/diary").json()["entries"]
    assert len(entries) == 1


def test_diary_entry_with_feedback_and_single_follow_up(client, fake_llm, form_data):
    aid = _create_assessment(client, form_data)["id"]
    fake_llm.reply = "Stairs load the knee a lot; try taking them one at a time."

    entry = client.post(
        f"/api/assessments/{aid}/diary",
        json={"entryType": "pain", "entryText": "Sore after stairs", "requestAiFeedback": True},
    ).json()
    assert entry["aiResponse"].startswith("Stairs load the knee")

    fake_llm.reply = "Yes, a railing helps."
    r = client.post(f"/api/diary/{entry['id']}/follow-up", json={"question": "Should I use the railing?"})
    assert r.status_code == 200
    assert r.json()["followUp"]["response"] == "Yes, a railing helps."

    again = client.post(f"/api/diary/{entry['id']}/follow-up", json={"question": "And going down?"})
    assert again.status_code == 409


def test_diary_entry_edit_and_cascade_delete(client, form_data):
    aid = _create_assessment(client, form_data)["id"]
    entry = client.post(f"/api/assessments/{aid}/diary", json={"entryType": "general", "entryText": "Day one"}).json()

    r = client.patch(f"/api/diary/{entry['id']}", json={"entryText": "Day one, edited"})
    assert r.json()["entryText"] == "Day one, edited"

    client.delete(f"/api/assessments/{aid}")
    assert client.patch(f"/api/diary/{entry['id']}", json={"entryText": "gone"}).status_code == 404


def test_unknown_assessment_diary_is_404(client):
    assert client.get("/api/assessments/nope/diary").status_code == 404


def test_analyze_malformed_json_is_400(client):
    r = client.post(ANALYZE, content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid request data"
    assert body["details"][0]["type"] == "json_invalid"


def test_analyze_empty_body_is_400(client):
    r = client.post(ANALYZE)
    assert r.status_code == 400
    assert r.json()["details"]


def test_malformed_bodies_still_count_against_rate_limit(client, form_data):
    client.post(ANALYZE, content=b"{oops", headers={"content-type": "application/json"})
    client.post(ANALYZE)
    assert client.post(ANALYZE, json=_analyze_body(form_data)).status_code == 429


MIXED_TIMESTAMP_ENTRIES = [
    {"entryType": "pain", "painLevel": 7, "entryText": "Bad day", "createdAt": "2025-03-01T10:00:00Z"},
    {"entryType": "pain", "painLevel": 4, "entryText": "Better", "createdAt": "2025-03-02T10:00:00"},
]


def test_diary_feedback_accepts_mixed_timestamps(client, fake_llm):
    fake_llm.reply = "Nice improvement."
    r = client.post(
        "/api/diary/ai-feedback",
        json={
            "entryType": "pain",
            "entryText": "Feeling okay",
            "recentEntries": MIXED_TIMESTAMP_ENTRIES,
            "assessment": {"selectedMuscles": ["Lower Back"], "createdAt": "2025-02-28T09:00:00+02:00"},
        },
    )
    assert r.status_code == 200
    assert "Trend: improving" in fake_llm.prompts[-1]


def test_diary_insights_accepts_mixed_timestamps(client, fake_llm):
    fake_llm.reply = (
        '{"dateRange": "2025-03-01 - 2025-03-02", "entryCount": 2, "timeSpanDays": 1, '
        '"insights": [{"title": "Pain easing", "description": "From 7 to 4.", "category": "trend"}]}'
    )
    r = client.post(
        "/api/diary/insights",
        json={"entries": MIXED_TIMESTAMP_ENTRIES, "assessment": {"selectedMuscles": ["Lower Back"]}},
    )
    assert r.status_code == 200
    assert r.json()["entryCount"] == 2
    assert "2025-03-01 - 2025-03-02" in fake_llm.prompts[-1]
