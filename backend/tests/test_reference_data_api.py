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


def test_teachers_are_listed_by_name(client, admin_headers, school):
    response = client.get("/api/teachers", headers=admin_headers)
    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Alice Baker", "Bob Carter"]


def test_teacher_update_and_duplicate_email(client, admin_headers, school):
    updated = client.put(
        f"/api/teachers/{school['alice']}",
        json={"name": "  Alice Brown ", "color": "#ABCDEF"},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Alice Brown"
    assert updated.json()["color"] == "#abcdef"

    clash = client.put(f"/api/teachers/{school['alice']}", json={"email": "bob@example.com"}, headers=admin_headers)
    assert clash.status_code == 409

    duplicate = client.post(
        "/api/teachers",
        json={"name": "Another Bob", "email": "bob@example.com"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409


def test_invalid_color_is_rejected(client, admin_headers, school):
    response = client.post(
        "/api/teachers",
        json={"name": "Carol", "email": "carol@example.com", "color": "red"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_deleting_a_teacher_removes_their_entries(client, admin_headers, school):
    add_entry(client, admin_headers, school)
    add_entry(client, admin_headers, school, teacher_id=school["bob"])

    response = client.delete(f"/api/teachers/{school['alice']}", headers=admin_headers)
    assert response.status_code == 200

    remaining = client.get("/api/schedules", headers=admin_headers).json()
    assert [item["teacher_id"] for item in remaining] == [school["bob"]]
    assert client.delete(f"/api/teachers/{school['alice']}", headers=admin_headers).status_code == 404


def test_teacher_weekly_hours(client, admin_headers, school):
    add_entry(client, admin_headers, school)
    add_entry(client, admin_headers, school, day_of_week=1, start_time="09:00", end_time="10:15")
    add_entry(client, admin_headers, school, teacher_id=school["bob"])

    response = client.get(f"/api/teachers/{school['alice']}/hours", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"teacher_id": school["alice"], "minutes": 135, "label": "2h 15m"}

    idle = client.get(f"/api/teachers/{school['bob']}/hours", headers=admin_headers).json()
    assert idle["label"] == "1h"


def test_subjects_crud(client, admin_headers, school):
    listing = client.get("/api/subjects", headers=admin_headers).json()
    assert {item["name"]: item["type"] for item in listing} == {"Art": "ELECTIVE", "Maths": "MAIN"}

    duplicate = client.post("/api/subjects", json={"name": "Maths"}, headers=admin_headers)
    assert duplicate.status_code == 409

    updated = client.put(f"/api/subjects/{school['art']}", json={"type": "ACTIVITY"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["type"] == "ACTIVITY"

    add_entry(client, admin_headers, school, subject_id=school["art"])
    assert client.delete(f"/api/subjects/{school['art']}", headers=admin_headers).status_code == 200
    assert client.get("/api/schedules", headers=admin_headers).json() == []


def test_year_groups_are_ordered_and_deletion_cleans_up(client, admin_headers, school):
    client.post("/api/year-groups", json={"name": "Year 6", "sort_order": 6}, headers=admin_headers)
    names = [item["name"] for item in client.get("/api/year-groups", headers=admin_headers).json()]
    assert names == ["Year 6", "Year 7", "Year 8"]

    student = client.post(
        "/api/students",
        json={"name": "Sam", "year_group_id": school["year7"]},
        headers=admin_headers,
    ).json()
    add_entry(client, admin_headers, school)
    add_entry(client, admin_headers, school, year_group_id=school["year8"], day_of_week=1)

    response = client.delete(f"/api/year-groups/{school['year7']}", headers=admin_headers)
    assert response.status_code == 200

    remaining = client.get("/api/schedules", headers=admin_headers).json()
    assert [item["year_group_id"] for item in remaining] == [school["year8"]]
    students = client.get("/api/students", headers=admin_headers).json()
    assert students == [{"id": student["id"], "name": "Sam", "year_group_id": None}]


def test_duplicate_year_group_name(client, admin_headers, school):
    response = client.post("/api/year-groups", json={"name": "Year 7"}, headers=admin_headers)
    assert response.status_code == 409


def test_students_filter_and_delete(client, admin_headers, school):
    sam = client.post("/api/students", json={"name": "Sam", "year_group_id": school["year7"]}, headers=admin_headers).json()
    client.post("/api/students", json={"name": "Ria", "year_group_id": school["year8"]}, headers=admin_headers)

    year7 = client.get("/api/students", params={"year_group_id": school["year7"]}, headers=admin_headers).json()
    assert [item["name"] for item in year7] == ["Sam"]

    entry = add_entry(client, admin_headers, school, student_ids=[sam["id"]])
    assert client.delete(f"/api/students/{sam['id']}", headers=admin_headers).status_code == 200

    refreshed = client.get("/api/schedules", headers=admin_headers).json()
    assert refreshed[0]["id"] == entry["id"]
    assert refreshed[0]["student_ids"] == []


def test_student_needs_known_year_group(client, admin_headers, school):
    response = client.post("/api/students", json={"name": "Sam", "year_group_id": "missing"}, headers=admin_headers)
    assert response.status_code == 404


def test_period_listing(client, admin_headers):
    response = client.get("/api/periods", headers=admin_headers)
    assert response.status_code == 200
    periods = response.json()
    assert len(periods) == 10
    assert periods[1] == {
        "id": "p1",
        "label": "08:00 - 09:00",
        "start": "08:00",
        "end": "09:00",
        "display": "1",
        "is_break": False,
    }
    assert [item["id"] for item in periods if item["is_break"]] == ["b1", "b2", "end"]
