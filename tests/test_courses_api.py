from conftest import auth_headers, make_course, make_department, make_user


def _course_payload(department_id, code="MA101"):
    return {
        "name": "Linear Algebra",
        "code": code,
        "department_id": department_id,
        "schedule": [
            {"day": "monday", "start_time": "09:00", "end_time": "10:00"},
            {"day": "Thursday", "start_time": "14:00", "end_time": "15:30"},
        ],
        "semester_start_date": "2026-09-01",
        "semester_duration": 4,
    }


def test_create_course(client, db, teacher):
    department = make_department(db)
    res = client.post("/api/courses/create", json=_course_payload(department.id), headers=auth_headers(teacher))
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["teacher_id"] == teacher.id
    assert [e["day"] for e in body["schedule"]] == ["Monday", "Thursday"]
    assert body["student_ids"] == []


def test_create_course_duplicate_code(client, db, teacher):
    department = make_department(db)
    headers = auth_headers(teacher)
    assert client.post("/api/courses/create", json=_course_payload(department.id), headers=headers).status_code == 201
    res = client.post("/api/courses/create", json=_course_payload(department.id), headers=headers)
    assert res.status_code == 409


def test_create_course_validates_schedule(client, db, teacher):
    department = make_department(db)
    payload = _course_payload(department.id)
    payload["schedule"][0]["start_time"] = "9am"
    res = client.post("/api/courses/create", json=payload, headers=auth_headers(teacher))
    assert res.status_code == 422

    payload = _course_payload(department.id)
    payload["schedule"][0]["day"] = "Funday"
    res = client.post("/api/courses/create", json=payload, headers=auth_headers(teacher))
    assert res.status_code == 422


def test_create_course_unknown_department(client, teacher):
    res = client.post("/api/courses/create", json=_course_payload(9999), headers=auth_headers(teacher))
    assert res.status_code == 404


def test_students_cannot_create_courses(client, db, students):
    department = make_department(db)
    res = client.post("/api/courses/create", json=_course_payload(department.id), headers=auth_headers(students[0]))
    assert res.status_code == 403


def test_register_for_department(client, db, teacher):
    department = make_department(db)
    first = make_course(db, teacher, department=department)
    second = make_course(db, teacher, department=department)
    student = make_user(db, descriptor=[0.5, 0.5, 0.5, 0.5])

    res = client.post("/api/courses/register", json={"department_id": department.id}, headers=auth_headers(student))
    assert res.status_code == 200
    body = res.json()
    assert [c["id"] for c in body] == [first.id, second.id]
    assert all(student.id in c["student_ids"] for c in body)

    # registering again does not duplicate enrollments
    res = client.post("/api/courses/register", json={"department_id": department.id}, headers=auth_headers(student))
    assert res.status_code == 200
    assert all(c["student_ids"].count(student.id) == 1 for c in res.json())


def test_course_lists(client, db, course, teacher, students):
    teacher_courses = client.get("/api/courses/teacher", headers=auth_headers(teacher)).json()
    assert [c["id"] for c in teacher_courses] == [course.id]

    student_courses = client.get("/api/courses/", headers=auth_headers(students[0])).json()
    assert student_courses[0]["teacher"]["id"] == teacher.id
    assert [s["id"] for s in student_courses[0]["students"]] == [s.id for s in students]

    loner = make_user(db, role="teacher")
    res = client.get("/api/courses/teacher", headers=auth_headers(loner))
    assert res.status_code == 404


def test_courses_by_teacher_report(client, course, teacher):
    res = client.get("/api/courses/courses-by-teacher", headers=auth_headers(teacher))
    assert res.status_code == 200
    assert res.json() == [{
        "course_name": course.name,
        "course_code": course.code,
        "total_students": 3,
        "attendance_by_date": [],
    }]


def test_update_course(client, db, course, teacher):
    other = make_user(db, role="teacher")
    payload = {"name": "Advanced Algorithms", "schedule": [{"day": "Friday", "start_time": "11:00", "end_time": "12:00"}]}

    res = client.put(f"/api/courses/update/{course.id}", json=payload, headers=auth_headers(other))
    assert res.status_code == 403

    res = client.put(f"/api/courses/update/{course.id}", json=payload, headers=auth_headers(teacher))
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Advanced Algorithms"
    assert body["schedule"] == [{"day": "Friday", "start_time": "11:00", "end_time": "12:00"}]


def test_delete_course_with_attendance(client, course, teacher):
    headers = auth_headers(teacher)
    assert client.post(f"/api/attendance/create/{course.id}", headers=headers).status_code == 201

    res = client.delete(f"/api/courses/delete/{course.id}", headers=headers)
    assert res.status_code == 200
    assert client.get("/api/courses/teacher", headers=headers).status_code == 404


def test_delete_unknown_course(client, teacher):
    res = client.delete("/api/courses/delete/9999", headers=auth_headers(teacher))
    assert res.status_code == 404


def test_departments(client, db, teacher):
    res = client.post("/api/department/create", json={"name": "Physics"})
    assert res.status_code == 201
    physics = res.json()
    assert physics["course_ids"] == []

    assert client.post("/api/department/create", json={"name": "Physics"}).status_code == 409
    assert client.post("/api/department/create", json={"name": "  "}).status_code == 400

    res = client.get("/api/department/")
    assert [d["name"] for d in res.json()] == ["Physics"]

    res = client.get(f"/api/courses/department/{physics['id']}", headers=auth_headers(teacher))
    assert res.status_code == 404
