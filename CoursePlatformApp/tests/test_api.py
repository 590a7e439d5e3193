import pytest
from rest_framework.test import APIClient

from CoursePlatformApp.core.choices import CourseStatus, MaterialType
from CoursePlatformApp.courses.models import Course
from CoursePlatformApp.domain.services import content_service, course_service, grading_service

pytestmark = pytest.mark.django_db


def items(resp):
    data = resp.data
    if isinstance(data, dict) and "results" in data:
        return data["results"]
    return data


@pytest.mark.parametrize("status,public,visible", [
    (CourseStatus.PUBLISHED, True, True),
    (CourseStatus.PUBLISHED, False, False),
    (CourseStatus.DRAFT, True, False),
    (CourseStatus.PENDING_REVIEW, True, False),
    (CourseStatus.REJECTED, True, False),
    (CourseStatus.ARCHIVED, True, False),
])
def test_course_visibility_matrix(status, public, visible, tutor, student, login):
    course = course_service.create_course(tutor, {"title": "Vis", "is_public": public})
    Course.objects.filter(pk=course.pk).update(status=status)

    anon_ids = [c["id"] for c in items(APIClient().get("/api/v1/courses/"))]
    student_ids = [c["id"] for c in items(login(student).get("/api/v1/courses/"))]
    owner_ids = [c["id"] for c in items(login(tutor).get("/api/v1/courses/"))]
    assert (course.id in anon_ids) is visible
    assert (course.id in student_ids) is visible
    assert course.id in owner_ids


def test_create_course_as_tutor_starts_in_draft(tutor, login):
    resp = login(tutor).post(
        "/api/v1/courses/", {"title": "New", "price": "10.00", "status": "PUBLISHED"}, format="json"
    )
    assert resp.status_code == 201
    assert resp.data["status"] == CourseStatus.DRAFT
    assert resp.data["creator"]["id"] == tutor.id


def test_student_cannot_create_course(student, login):
    resp = login(student).post("/api/v1/courses/", {"title": "Nope"}, format="json")
    assert resp.status_code == 403
    assert resp.data["error"]["code"] == "authorization_error"


def test_lifecycle_endpoints(tutor, admin, course, login):
    owner, staff = login(tutor), login(admin)

    resp = owner.post(f"/api/v1/courses/{course.id}/submit-review/", {}, format="json")
    assert resp.status_code == 200
    assert resp.data["status"] == CourseStatus.PENDING_REVIEW

    resp = owner.put(f"/api/v1/courses/{course.id}/publish/", {}, format="json")
    assert resp.status_code == 403
    assert resp.data["error"]["code"] == "authorization_error"

    assert staff.get("/api/v1/courses/pending/count/").data == {"count": 1}

    resp = staff.put(f"/api/v1/courses/{course.id}/reject/", {"reason": "thin"}, format="json")
    assert resp.status_code == 200
    assert resp.data["rejection_reason"] == "thin"

    resp = staff.put(f"/api/v1/courses/{course.id}/publish/", {}, format="json")
    assert resp.status_code == 422
    assert resp.data["error"]["code"] == "invalid_transition"

    version = owner.get(f"/api/v1/courses/{course.id}/").data["version"]
    resp = owner.post(f"/api/v1/courses/{course.id}/submit-review/", {"version": version}, format="json")
    assert resp.status_code == 200
    resp = staff.put(f"/api/v1/courses/{course.id}/publish/", {"version": version}, format="json")
    assert resp.status_code == 409
    assert resp.data["error"]["code"] == "conflict"

    resp = staff.put(f"/api/v1/courses/{course.id}/publish/", {}, format="json")
    assert resp.status_code == 200
    assert resp.data["status"] == CourseStatus.PUBLISHED

    history = items(owner.get(f"/api/v1/courses/{course.id}/transitions/"))
    assert [h["to_status"] for h in history][-1] == CourseStatus.PUBLISHED


def test_pending_queue_is_admin_only(tutor, student, admin, course, login):
    submitted = login(tutor).post(f"/api/v1/courses/{course.id}/submit-review/", {}, format="json")
    assert submitted.status_code == 200

    for user in (tutor, student):
        client = login(user)
        for url in ("/api/v1/courses/pending/", "/api/v1/courses/pending/count/"):
            resp = client.get(url)
            assert resp.status_code == 403
            assert resp.data["error"]["code"] == "authorization_error"

    staff = login(admin)
    assert [c["id"] for c in items(staff.get("/api/v1/courses/pending/"))] == [course.id]
    assert staff.get("/api/v1/courses/pending/count/").data == {"count": 1}


def test_patch_cannot_change_status(tutor, course, login):
    resp = login(tutor).patch(f"/api/v1/courses/{course.id}/", {"title": "Renamed", "status": "PUBLISHED"}, format="json")
    assert resp.status_code == 200
    assert resp.data["title"] == "Renamed"
    assert resp.data["status"] == CourseStatus.DRAFT


def test_module_tree_and_moves(tutor, course, login):
    client = login(tutor)
    ids = [
        client.post("/api/v1/modules/", {"course": course.id, "title": t}, format="json").data["id"]
        for t in ("A", "B", "C")
    ]
    resp = client.post(f"/api/v1/modules/{ids[2]}/move-up/")
    assert resp.status_code == 200
    assert resp.data["order_index"] == 1

    resp = client.post(f"/api/v1/modules/{ids[0]}/move-up/")
    assert resp.status_code == 200
    assert resp.data["order_index"] == 0

    tree = client.get(f"/api/v1/courses/{course.id}/modules/").data
    assert [m["title"] for m in tree] == ["A", "C", "B"]

    assert client.delete(f"/api/v1/modules/{ids[0]}/").status_code == 204
    tree = client.get(f"/api/v1/courses/{course.id}/modules/").data
    assert [(m["title"], m["order_index"]) for m in tree] == [("C", 0), ("B", 1)]


def test_order_index_is_read_only(tutor, course, login):
    resp = login(tutor).post(
        "/api/v1/modules/", {"course": course.id, "title": "A", "order_index": 9}, format="json"
    )
    assert resp.status_code == 201
    assert resp.data["order_index"] == 0


def test_material_without_payload_is_validation_error(tutor, course, login):
    module = content_service.create_module(tutor, course.pk, "M")
    resp = login(tutor).post(
        "/api/v1/materials/", {"module": module.id, "type": MaterialType.VIDEO, "title": "Empty"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"


def test_serializer_errors_use_envelope(tutor, login):
    resp = login(tutor).post("/api/v1/courses/", {"price": "abc"}, format="json")
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
    assert "title" in resp.data["error"]["details"]


def test_unauthenticated_write_uses_envelope(course):
    resp = APIClient().post(f"/api/v1/courses/{course.id}/submit-review/")
    assert resp.status_code == 401
    assert resp.data["error"]["code"] == "not_authenticated"


def test_submission_and_grading_flow(tutor, student, published_course, login):
    assignment = grading_service.create_assignment(tutor, published_course.pk, {"title": "HW", "max_score": 100})
    s_client = login(student)
    assert s_client.post(f"/api/v1/courses/{published_course.id}/enroll/").status_code == 201

    post = s_client.post(
        f"/api/v1/assignments/{assignment.id}/submissions/", {"content": "answer"}, format="multipart"
    )
    assert post.status_code == 201
    submission_id = post.data["id"]

    t_client = login(tutor)
    detail = t_client.get(f"/api/v1/assignments/{assignment.id}/")
    assert detail.data["submission_count"] == 1
    assert detail.data["ungraded_count"] == 1

    bad = t_client.post(
        f"/api/v1/assignments/{assignment.id}/submissions/{submission_id}/grade/", {"score": 101}, format="json"
    )
    assert bad.status_code == 400

    graded = t_client.post(
        f"/api/v1/assignments/{assignment.id}/submissions/{submission_id}/grade/",
        {"score": 95, "feedback": "Great"},
        format="json",
    )
    assert graded.status_code == 200
    assert graded.data["score"] == 95
    assert graded.data["is_graded"] is True

    assert t_client.get(f"/api/v1/assignments/{assignment.id}/").data["ungraded_count"] == 0

    forbidden = s_client.post(
        f"/api/v1/assignments/{assignment.id}/submissions/{submission_id}/grade/", {"score": 100}, format="json"
    )
    assert forbidden.status_code == 403


def test_submission_create_is_throttled(tutor, student, published_course, login, monkeypatch):
    from CoursePlatformApp.api.throttles import SubmissionRateThrottle
    monkeypatch.setattr(SubmissionRateThrottle, "THROTTLE_RATES", {"submission_create": "2/hour"})

    assignment = grading_service.create_assignment(tutor, published_course.pk, {"title": "HW"})
    course_service.enroll(student, published_course.pk)
    client = login(student)
    url = f"/api/v1/assignments/{assignment.id}/submissions/"
    codes = [client.post(url, {"content": f"v{i}"}, format="json").status_code for i in range(3)]
    assert codes == [201, 201, 429]


@pytest.mark.parametrize("method,url", [
    ("put", "/api/v1/courses/abc/publish/"),
    ("get", "/api/v1/courses/abc/"),
    ("get", "/api/v1/assignments/abc/submissions/"),
    ("post", "/api/v1/modules/abc/move-up/"),
])
def test_non_numeric_ids_are_not_found(method, url, admin, login):
    resp = getattr(login(admin), method)(url)
    assert resp.status_code == 404


def test_non_numeric_course_filter_is_validation_error(tutor, login):
    resp = login(tutor).get("/api/v1/assignments/?course=abc")
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
