def add_entry(client, headers, school, **overrides):
    payload = {
        "teacher_id": school["alice"],
        "subject_id": school["maths"],
        "year_group_id": school["year7"],
        "day_of_week": 0,
        "start_time": "08:00",
        "end_time": "09:00",
    }
    payload.update(overrides)
    response = client.post("/api/schedules", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_drop(school, **overrides):
    payload = {
        "kind": "create",
        "subject_id": school["art"],
        "teacher_id": school["alice"],
        "day_of_week": 0,
        "period_id": "p1",
        "selected_year_group_id": school["year7"],
    }
    payload.update(overrides)
    return payload


def move_drop(entry_id, **overrides):
    payload = {"kind": "move", "entry_id": entry_id, "day_of_week": 0, "period_id": "p1"}
    payload.update(overrides)
    return payload


def test_resolve_on_free_period_previews_a_create(client, admin_headers, school):
    response = client.post("/api/placement/resolve", json=create_drop(school), headers=admin_headers)

    assert response.status_code == 200, response.text
    plan = response.json()
    assert plan["outcome"] == "create"
    assert plan["overlap_ids"] == []
    (mutation,) = plan["mutations"]
    assert mutation["action"] == "create"
    assert mutation["fields"]["start_time"] == "08:00"
    assert mutation["fields"]["end_time"] == "09:00"
    assert mutation["fields"]["year_group_id"] == school["year7"]

    # Resolving never writes.
    assert client.get("/api/schedules", headers=admin_headers).json() == []


def test_apply_fills_the_remaining_gap(client, admin_headers, school):
    add_entry(client, admin_headers, school, start_time="08:00", end_time="08:20")
    add_entry(client, admin_headers, school, start_time="08:40", end_time="09:00")

    response = client.post("/api/placement/apply", json=create_drop(school), headers=admin_headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["plan"]["outcome"] == "create"
    assert len(body["plan"]["overlap_ids"]) == 2
    (created,) = body["schedules"]
    assert (created["start_time"], created["end_time"]) == ("08:20", "08:40")
    assert created["subject_id"] == school["art"]
    assert len(client.get("/api/schedules", headers=admin_headers).json()) == 3


def test_apply_on_full_period_replaces_same_year_group_entry(client, admin_headers, school):
    other = add_entry(client, admin_headers, school, start_time="08:00", end_time="08:30", year_group_id=school["year8"])
    mine = add_entry(client, admin_headers, school, start_time="08:30", end_time="09:00")

    response = client.post("/api/placement/apply", json=create_drop(school), headers=admin_headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["plan"]["outcome"] == "replace"
    assert [item["action"] for item in body["plan"]["mutations"]] == ["delete", "create"]
    assert body["plan"]["mutations"][0]["entry_id"] == mine["id"]
    (created,) = body["schedules"]
    assert (created["start_time"], created["end_time"]) == ("08:00", "09:00")

    remaining = {item["id"] for item in client.get("/api/schedules", headers=admin_headers).json()}
    assert remaining == {other["id"], created["id"]}


def test_without_selected_year_group_the_first_one_is_used(client, admin_headers, school):
    response = client.post(
        "/api/placement/apply",
        json=create_drop(school, selected_year_group_id=None),
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["schedules"][0]["year_group_id"] == school["year7"]


def test_create_without_any_year_group_is_refused(client, admin_headers, school):
    for key in ("year7", "year8"):
        client.delete(f"/api/year-groups/{school[key]}", headers=admin_headers)

    response = client.post(
        "/api/placement/apply",
        json=create_drop(school, selected_year_group_id=None),
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["message"] == "Select a year group first"


def test_move_to_free_period(client, admin_headers, school):
    entry = add_entry(client, admin_headers, school, day_of_week=3, start_time="11:20", end_time="12:20")

    response = client.post(
        "/api/placement/apply",
        json=move_drop(entry["id"], teacher_id=school["bob"], selected_year_group_id=school["year7"]),
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["plan"]["outcome"] == "move"
    (moved,) = body["schedules"]
    assert moved["id"] == entry["id"]
    assert moved["teacher_id"] == school["bob"]
    assert (moved["day_of_week"], moved["start_time"], moved["end_time"]) == (0, "08:00", "09:00")


def test_move_onto_occupied_period_swaps(client, admin_headers, school):
    x = add_entry(client, admin_headers, school)
    y = add_entry(client, admin_headers, school, teacher_id=school["bob"], subject_id=school["art"], year_group_id=school["year8"])

    response = client.post(
        "/api/placement/apply",
        json=move_drop(x["id"], teacher_id=school["bob"], selected_year_group_id=school["year7"]),
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["plan"]["outcome"] == "swap"
    rows = {item["id"]: item for item in client.get("/api/schedules", headers=admin_headers).json()}
    assert rows[x["id"]]["teacher_id"] == school["bob"]
    assert rows[x["id"]]["subject_id"] == school["maths"]
    assert rows[y["id"]]["teacher_id"] == school["alice"]
    assert rows[y["id"]]["subject_id"] == school["art"]
    assert rows[y["id"]]["year_group_id"] == school["year8"]


def test_dropping_an_entry_on_itself_changes_nothing(client, admin_headers, school):
    entry = add_entry(client, admin_headers, school)

    response = client.post(
        "/api/placement/apply",
        json=move_drop(entry["id"], teacher_id=school["alice"], selected_year_group_id=school["year7"]),
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["plan"] == {"outcome": "noop", "mutations": [], "overlap_ids": [entry["id"]]}
    assert response.json()["schedules"] == []


def test_moving_a_missing_entry_conflicts(client, admin_headers, school):
    response = client.post(
        "/api/placement/apply",
        json=move_drop("no-such-entry", teacher_id=school["alice"], selected_year_group_id=school["year7"]),
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_unknown_period_and_bad_payloads(client, admin_headers, school):
    unknown = client.post("/api/placement/resolve", json=create_drop(school, period_id="p9"), headers=admin_headers)
    assert unknown.status_code == 404

    missing_subject = client.post(
        "/api/placement/resolve",
        json=create_drop(school, subject_id=None),
        headers=admin_headers,
    )
    assert missing_subject.status_code == 422

    weekend = client.post("/api/placement/resolve", json=create_drop(school, day_of_week=6), headers=admin_headers)
    assert weekend.status_code == 422


def test_placement_is_audited(client, admin_headers, school):
    client.post("/api/placement/apply", json=create_drop(school), headers=admin_headers)

    logs = client.get("/api/activity/logs", params={"entity_type": "schedule"}, headers=admin_headers).json()
    assert [item["action"] for item in logs] == ["schedule.create"]
