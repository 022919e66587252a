"""End-to-end tests through the FastAPI app."""

import pytest


@pytest.fixture
def refs(client):
    register = client.post("/admin/skills", json={"name": "Register"}).json()["skill_id"]
    opening = client.post("/admin/skills", json={"name": "Store Opening"}).json()["skill_id"]
    status = client.post("/admin/statuses", json={"name": "Scheduled"}).json()["status_id"]
    alice = client.post("/admin/employees", json={"name": "Alice"}).json()["employee_id"]
    bob = client.post("/admin/employees", json={"name": "Bob"}).json()["employee_id"]
    client.put(f"/admin/employees/{alice}/skills", json={"skills": [{"skill_id": register, "rating": 4}]})
    client.put(f"/admin/employees/{bob}/skills", json={"skills": [{"skill_id": opening}]})
    return {"register": register, "opening": opening, "status": status, "alice": alice, "bob": bob}


def shift_body(refs, employee="alice", day="2024-01-16", start="09:00:00", end="17:00:00", **extra):
    body = {
        "employee_id": refs[employee],
        "date_of_day": day,
        "scheduled_start_time": start,
        "scheduled_end_time": end,
        "status_id": refs["status"],
    }
    body.update(extra)
    return body


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestAdmin:
    def test_skill_slug_is_generated(self, client, refs):
        skills = client.get("/admin/skills").json()
        assert [s["slug"] for s in skills] == ["register", "store-opening"]

    def test_duplicate_skill(self, client, refs):
        assert client.post("/admin/skills", json={"name": "Register"}).status_code == 409

    def test_assign_unknown_skill(self, client, refs):
        res = client.put(f"/admin/employees/{refs['alice']}/skills", json={"skills": [{"skill_id": 999}]})
        assert res.status_code == 404

    def test_schedule_preference_upsert(self, client, refs):
        url = f"/admin/employees/{refs['alice']}/schedule-preference"
        assert client.put(url, json={"maximum_hours": 20, "employment_type": "PT"}).status_code == 200
        res = client.put(url, json={"maximum_hours": 25, "employment_type": "PT"})
        assert res.json() == {"employee_id": refs["alice"], "maximum_hours": 25, "employment_type": "PT"}

    def test_preference_for_unknown_employee(self, client, refs):
        res = client.put("/admin/employees/999/schedule-preference", json={"maximum_hours": 20, "employment_type": "FT"})
        assert res.status_code == 404


class TestDailySchedules:
    def test_create_valid(self, client, refs):
        res = client.post("/daily-schedules", json=shift_body(refs, required_skills=[refs["register"]]))
        assert res.status_code == 201
        body = res.json()
        assert body["validation_result"]["valid"] is True
        assert body["data"]["agree_on_exception"] is False
        assert body["data"]["scheduled_hours"] == 8

    def test_create_with_violation_is_stored_as_exception(self, client, refs):
        res = client.post("/daily-schedules", json=shift_body(refs, required_skills=[refs["opening"]]))
        assert res.status_code == 201
        body = res.json()
        assert body["validation_result"]["violations"] == [
            "Employee does not possess required skills: Store Opening"
        ]
        assert body["data"]["agree_on_exception"] is True
        assert body["data"]["exception_notes"].startswith("Business rule violations: ")

    def test_preference_cap(self, client, refs):
        client.put(
            f"/admin/employees/{refs['alice']}/schedule-preference",
            json={"maximum_hours": 6, "employment_type": "PT"},
        )
        body = client.post("/daily-schedules", json=shift_body(refs)).json()
        assert body["validation_result"]["violations"] == ["Weekly hours limit exceeded. Total: 8h, Maximum: 6h"]

    def test_end_before_start_is_rejected(self, client, refs):
        res = client.post("/daily-schedules", json=shift_body(refs, start="17:00", end="09:00"))
        assert res.status_code == 422
        assert client.get("/daily-schedules").json() == []

    def test_malformed_time_is_rejected(self, client, refs):
        res = client.post("/daily-schedules", json=shift_body(refs, start="nine"))
        assert res.status_code == 422

    def test_unknown_employee(self, client, refs):
        body = shift_body(refs)
        body["employee_id"] = 999
        res = client.post("/daily-schedules", json=body)
        assert res.status_code == 404
        assert res.json()["error_code"] == "EMPLOYEE_NOT_FOUND"

    def test_day_batch_with_overlap(self, client, refs):
        payload = {
            "date_of_day": "2024-01-16",
            "schedules": [
                {"employee_id": refs["alice"], "scheduled_start_time": "09:00", "scheduled_end_time": "13:00",
                 "status_id": refs["status"]},
                {"employee_id": refs["alice"], "scheduled_start_time": "12:00", "scheduled_end_time": "16:00",
                 "status_id": refs["status"]},
            ],
        }
        res = client.post("/daily-schedules/day", json=payload)
        assert res.status_code == 201
        body = res.json()
        assert body["validation_result"]["valid"] is False
        assert [d["agree_on_exception"] for d in body["data"]] == [True, True]
        assert body["day_summary"]["total_hours"] == 8

    def test_empty_day_batch(self, client, refs):
        res = client.post("/daily-schedules/day", json={"date_of_day": "2024-01-16", "schedules": []})
        assert res.status_code == 422

    def test_show_update_delete(self, client, refs):
        created = client.post("/daily-schedules", json=shift_body(refs)).json()["data"]
        sid = created["id"]

        assert client.get(f"/daily-schedules/{sid}").json()["scheduled_end_time"] == "17:00:00"

        res = client.put(f"/daily-schedules/{sid}", json={"scheduled_end_time": "12:00:00"})
        assert res.status_code == 200
        assert res.json()["data"]["scheduled_hours"] == 3

        assert client.delete(f"/daily-schedules/{sid}").status_code == 204
        missing = client.get(f"/daily-schedules/{sid}")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "SCHEDULE_NOT_FOUND"

    def test_null_for_required_field_is_rejected(self, client, refs):
        sid = client.post("/daily-schedules", json=shift_body(refs)).json()["data"]["id"]
        for field in ("scheduled_start_time", "status_id", "employee_id"):
            res = client.put(f"/daily-schedules/{sid}", json={field: None})
            assert res.status_code == 422
        stored = client.get(f"/daily-schedules/{sid}").json()
        assert stored["scheduled_start_time"] == "09:00:00"
        assert stored["status_id"] == refs["status"]

    def test_null_clears_optional_field(self, client, refs):
        sid = client.post("/daily-schedules", json=shift_body(refs, actual_start_time="09:05:00")).json()["data"]["id"]
        res = client.put(f"/daily-schedules/{sid}", json={"actual_start_time": None})
        assert res.status_code == 200
        assert res.json()["data"]["actual_start_time"] is None

    def test_update_unknown(self, client, refs):
        assert client.put("/daily-schedules/999", json={"status_id": refs["status"]}).status_code == 404

    def test_attach_and_detach_skill(self, client, refs):
        sid = client.post("/daily-schedules", json=shift_body(refs)).json()["data"]["id"]
        assert client.post(f"/daily-schedules/{sid}/skills/{refs['opening']}").status_code == 204
        assert client.get(f"/daily-schedules/{sid}").json()["required_skills"] == [refs["opening"]]
        assert client.delete(f"/daily-schedules/{sid}/skills/{refs['opening']}").status_code == 204
        assert client.get(f"/daily-schedules/{sid}").json()["required_skills"] == []

    def test_list_filters(self, client, refs):
        client.post("/daily-schedules", json=shift_body(refs, day="2024-01-16"))
        client.post("/daily-schedules", json=shift_body(refs, employee="bob", day="2024-01-18"))
        assert len(client.get("/daily-schedules").json()) == 2
        assert len(client.get("/daily-schedules", params={"employee_id": refs["bob"]}).json()) == 1
        assert len(client.get("/daily-schedules", params={"start_date": "2024-01-17"}).json()) == 1

    def test_weekly_listing_and_summary(self, client, refs):
        client.post("/daily-schedules", json=shift_body(refs, day="2024-01-16"))
        client.post("/daily-schedules", json=shift_body(refs, day="2024-01-23"))

        week = client.get(f"/daily-schedules/weekly/{refs['alice']}", params={"date": "2024-01-22"}).json()
        assert week["week_start"] == "2024-01-16"
        assert week["week_end"] == "2024-01-22"
        assert len(week["schedules"]) == 1

        summary = client.get(f"/daily-schedules/weekly/{refs['alice']}/summary", params={"date": "2024-01-18"}).json()
        assert summary["total_scheduled_hours"] == 8
        assert summary["max_weekly_hours"] == 40

    def test_coverage(self, client, refs):
        client.post("/daily-schedules", json=shift_body(refs))
        res = client.get(
            "/daily-schedules/coverage",
            params={"date": "2024-01-16", "required_skills": [refs["register"], refs["opening"]]},
        )
        assert res.json()["missing_skills"] == [refs["opening"]]


class TestWeeklySchedules:
    def test_process_grouped_week(self, client, refs):
        payload = {
            "weekly_schedule": [
                {"date_of_day": "2024-01-16", "schedules": [
                    shift_body(refs), shift_body(refs, employee="bob"),
                ]},
                {"date_of_day": "2024-01-17", "schedules": [shift_body(refs)]},
            ]
        }
        res = client.post("/weekly-schedules/process", json=payload)
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["message"] == "Weekly schedule processed successfully"
        assert len(body["data"]["schedules"]) == 3
        assert body["data"]["week_summary"]["validation_status"] == "passed"
        assert body["validation_result"]["valid"] is True

    def test_structural_problem_is_rejected(self, client, refs):
        payload = {"weekly_schedule": [shift_body(refs), shift_body(refs, day="2024-01-17", start="25:99")]}
        res = client.post("/weekly-schedules/process", json=payload)
        assert res.status_code == 422
        body = res.json()
        assert body["error_code"] == "BATCH_REJECTED"
        assert body["details"]["violations"][0]["kind"] == "invalid_time_format"
        assert client.get("/daily-schedules").json() == []

    def test_mixed_shapes_store_every_row(self, client, refs):
        payload = {
            "weekly_schedule": [
                {"date_of_day": "2024-01-16", "schedules": [shift_body(refs)]},
                shift_body(refs, day="2024-01-17"),
            ]
        }
        res = client.post("/weekly-schedules/process", json=payload)
        assert res.status_code == 201
        assert [s["date_of_day"] for s in client.get("/daily-schedules").json()] == ["2024-01-16", "2024-01-17"]

    def test_non_object_entry_is_rejected(self, client, refs):
        for schedules in ([5], "abc"):
            payload = {"weekly_schedule": [{"date_of_day": "2024-01-16", "schedules": schedules}]}
            res = client.post("/weekly-schedules/process", json=payload)
            assert res.status_code == 422
            assert res.json()["details"]["violations"][0]["kind"] == "missing_field"
        assert client.get("/daily-schedules").json() == []

    def test_span_over_a_week_is_rejected(self, client, refs):
        payload = {"weekly_schedule": [shift_body(refs), shift_body(refs, day="2024-01-30")]}
        res = client.post("/weekly-schedules/process", json=payload)
        assert res.status_code == 422
        assert res.json()["details"]["violations"][0]["kind"] == "week_span"

    def test_empty_week(self, client, refs):
        assert client.post("/weekly-schedules/process", json={"weekly_schedule": []}).status_code == 422

    def test_analysis(self, client, refs):
        client.post("/daily-schedules", json=shift_body(refs, day="2024-01-16"))
        client.post("/daily-schedules", json=shift_body(refs, employee="bob", day="2024-01-17"))
        res = client.get("/weekly-schedules/analysis", params={"date": "2024-01-20", "employee_ids": [refs["bob"]]})
        data = res.json()["data"]
        assert data["total_schedules"] == 1
        assert list(data["daily_analysis"]) == ["2024-01-17"]
