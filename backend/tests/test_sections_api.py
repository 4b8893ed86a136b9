def test_list_sections(client):
    sections = client.get("/api/v1/sections").json()
    assert [s["id"] for s in sections][:3] == ["claimant", "accident", "physical"]
    assert len(sections) == 10
    assert sections[0]["api_path"] == "claimant-details"


def test_save_and_reload_section(client, auth_headers, case_id, claimant_payload):
    url = f"/api/v1/cases/{case_id}/sections/claimant-details"
    saved = client.put(url, json=claimant_payload, headers=auth_headers)
    assert saved.status_code == 200
    body = saved.json()
    assert body["section"] == "claimant"
    assert body["complete"] is True
    assert body["completion_percentage"] == 10

    reloaded = client.get(url, headers=auth_headers).json()
    assert reloaded["data"] == body["data"]
    assert reloaded["data"]["full_name"] == "John Smith"
    assert reloaded["data"]["gender"] == "Male"


def test_unsaved_section_reads_as_empty(client, auth_headers, case_id):
    body = client.get(f"/api/v1/cases/{case_id}/sections/prognosis", headers=auth_headers).json()
    assert body["data"] is None
    assert body["complete"] is False


def test_unknown_section_is_404(client, auth_headers, case_id):
    response = client.put(f"/api/v1/cases/{case_id}/sections/billing", json={}, headers=auth_headers)
    assert response.status_code == 404


def test_invalid_payload_is_422_and_leaves_case_untouched(client, auth_headers, case_id, claimant_payload):
    url = f"/api/v1/cases/{case_id}/sections/claimant-details"
    client.put(url, json=claimant_payload, headers=auth_headers)

    response = client.put(url, json={"full_name": "John Smith"}, headers=auth_headers)
    assert response.status_code == 422
    assert any(err["loc"][-1] == "date_of_birth" for err in response.json()["detail"])

    reloaded = client.get(url, headers=auth_headers).json()
    assert reloaded["data"]["date_of_birth"] == "1985-04-12"
    assert reloaded["completion_percentage"] == 10


def test_conditional_field_rejected(client, auth_headers, case_id):
    response = client.put(
        f"/api/v1/cases/{case_id}/sections/treatments",
        json={"scene_other_treatment": False, "scene_other_treatment_details": "Ice pack"},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_injuries_get_classification(client, auth_headers, case_id):
    client.put(
        f"/api/v1/cases/{case_id}/sections/accident-details",
        json={"accident_date": "2025-01-10", "accident_type": "Side impact", "impact_location": "Left Side"},
        headers=auth_headers,
    )
    body = client.put(
        f"/api/v1/cases/{case_id}/sections/physical-injury",
        json={"injuries": [
            {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Moderate", "current_severity": "Mild"},
            {"type": "Bruising", "onset_time": "Next Day", "initial_severity": "Mild",
             "current_severity": "Resolved", "resolution_days": "7"},
        ]},
        headers=auth_headers,
    ).json()
    neck, bruising = body["data"]["injuries"]
    assert neck["classification"] == "Whiplash"
    assert "mechanism" not in neck
    assert bruising["classification"] == "Non-whiplash"
    assert body["completion_percentage"] == 20


def test_saving_every_section_reaches_hundred(client, auth_headers, case_id, full_case):
    from medlegal.services.section_registry import SECTIONS

    percentage = 0
    for section in SECTIONS:
        response = client.put(
            f"/api/v1/cases/{case_id}/sections/{section.api_path}",
            json=full_case[section.field],
            headers=auth_headers,
        )
        assert response.status_code == 200, response.text
        assert response.json()["completion_percentage"] >= percentage
        percentage = response.json()["completion_percentage"]
    assert percentage == 100


def test_other_user_cannot_write_section(client, other_headers, case_id, claimant_payload):
    response = client.put(
        f"/api/v1/cases/{case_id}/sections/claimant-details", json=claimant_payload, headers=other_headers
    )
    assert response.status_code == 403


def test_mechanism_follows_accident_saved_after_injuries(client, auth_headers, case_id):
    client.put(
        f"/api/v1/cases/{case_id}/sections/physical-injury",
        json={"injuries": [
            {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Moderate", "current_severity": "Mild"},
        ]},
        headers=auth_headers,
    )
    client.put(
        f"/api/v1/cases/{case_id}/sections/accident-details",
        json={"accident_date": "2025-01-10", "accident_type": "Side impact", "impact_location": "Left Side"},
        headers=auth_headers,
    )

    report = client.get(f"/api/v1/cases/{case_id}/report", headers=auth_headers).json()
    physical = next(s for s in report["sections"] if s["id"] == "physical")
    neck = physical["paragraphs"][0]
    assert "Mechanism: Due to sudden jolt sideways" in neck
    assert "forward and backward" not in neck


def test_failed_save_rolls_back(client, auth_headers, case_id, claimant_payload, db, monkeypatch):
    from sqlalchemy.exc import OperationalError

    url = f"/api/v1/cases/{case_id}/sections/claimant-details"
    before = client.put(url, json=claimant_payload, headers=auth_headers).json()

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)
    response = client.put(url, json={**claimant_payload, "full_name": "Jane Doe"}, headers=auth_headers)
    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to save")

    monkeypatch.undo()
    reloaded = client.get(url, headers=auth_headers).json()
    assert reloaded["data"] == before["data"]
    assert reloaded["data"]["full_name"] == "John Smith"
    assert reloaded["completion_percentage"] == before["completion_percentage"] == 10
