import uuid

import pytest

from cccd_portal.models.models import AuthSession, Submission
from cccd_portal.services.submissions import record_upload
from conftest import STUDENT_PASSWORD, TEACHER_PASSWORD

PDF = "application/pdf"


def submit(db, user, name="cccd.pdf"):
    return record_upload(
        db,
        user_id=user.id,
        object_key=f"uploads/{user.id}/{uuid.uuid4()}-{name}",
        file_name=name,
        file_size=1024,
        mime_type=PDF,
    )


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_register_ignores_client_role(client):
    response = client.post(
        "/register",
        json={
            "email": "new@example.com",
            "password": "secret1",
            "cccd": "012345678901",
            "name": "Hoang Thi Dao",
            "role": "TEACHER",
        },
    )
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "STUDENT"
    assert user["cccd"] == "012345678901"
    assert "passwordHash" not in user
    assert "password_hash" not in user


def test_register_duplicate_email(client, student):
    response = client.post(
        "/register",
        json={
            "email": student.email,
            "password": "secret1",
            "cccd": "012345678901",
            "name": "Someone",
        },
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


def test_register_invalid_input(client):
    response = client.post(
        "/register",
        json={
            "email": "new@example.com",
            "password": "123",
            "cccd": "12345",
            "name": "X",
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation failed"


def test_login_sets_cookie_and_me(client, student):
    response = client.post(
        "/login", json={"email": student.email, "password": STUDENT_PASSWORD}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["id"] == student.id
    assert client.cookies.get("session_token") == body["accessToken"]

    me = client.get("/me")
    assert me.status_code == 200
    assert me.json()["email"] == student.email



def test_login_with_registered_mixed_case_email(client):
    email = "An.Nguyen@Example.COM"
    registered = client.post(
        "/register",
        json={
            "email": email,
            "password": "secret1",
            "cccd": "012345678901",
            "name": "Nguyen An",
        },
    )
    assert registered.status_code == 201

    response = client.post("/login", json={"email": email, "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "an.nguyen@example.com"


def test_register_blank_name(client):
    response = client.post(
        "/register",
        json={
            "email": "new@example.com",
            "password": "secret1",
            "cccd": "012345678901",
            "name": "   ",
        },
    )
    assert response.status_code == 400

def test_login_wrong_password(client, student):
    response = client.post(
        "/login", json={"email": student.email, "password": "nope-nope"}
    )
    assert response.status_code == 401


def test_logout_revokes_session(client, db, student_headers):
    assert client.get("/me", headers=student_headers).status_code == 200
    assert client.post("/logout", headers=student_headers).status_code == 204
    assert client.get("/me", headers=student_headers).status_code == 401
    db.expire_all()
    assert db.query(AuthSession).count() == 0


def test_presigned_url(client, student, student_headers):
    response = client.post(
        "/api/upload/presigned-url",
        json={
            "fileName": "cccd.pdf",
            "fileType": PDF,
            "fileSize": 2 * 1024 * 1024,
            "userId": student.id,
        },
        headers=student_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["fileKey"].startswith(f"uploads/{student.id}/")
    assert body["fileKey"].endswith("-cccd.pdf")
    assert body["expiresIn"] == 300
    assert body["uploadUrl"].startswith("https://")


@pytest.mark.parametrize(
    "file_type,file_size",
    [(PDF, 15 * 1024 * 1024 + 1), ("image/gif", 100), (PDF, 0)],
)
def test_presigned_url_rejects_bad_file(
    client, student, student_headers, file_type, file_size
):
    response = client.post(
        "/api/upload/presigned-url",
        json={
            "fileName": "cccd.pdf",
            "fileType": file_type,
            "fileSize": file_size,
            "userId": student.id,
        },
        headers=student_headers,
    )
    assert response.status_code == 400


def test_presigned_url_for_other_user_is_forbidden(
    client, other_student, student_headers
):
    response = client.post(
        "/api/upload/presigned-url",
        json={
            "fileName": "cccd.pdf",
            "fileType": PDF,
            "fileSize": 100,
            "userId": other_student.id,
        },
        headers=student_headers,
    )
    assert response.status_code == 403


def test_presigned_url_requires_session(client, student):
    response = client.post(
        "/api/upload/presigned-url",
        json={
            "fileName": "cccd.pdf",
            "fileType": PDF,
            "fileSize": 100,
            "userId": student.id,
        },
    )
    assert response.status_code == 401


def test_complete_upload_and_list_own_files(client, student, student_headers):
    response = client.post(
        "/api/upload/complete",
        json={
            "fileKey": f"uploads/{student.id}/abc-cccd.pdf",
            "fileName": "cccd.pdf",
            "fileSize": 2048,
            "mimeType": PDF,
            "userId": student.id,
        },
        headers=student_headers,
    )
    assert response.status_code == 201
    created = response.json()["file"]
    assert created["status"] == "PENDING"
    assert created["approvedAt"] is None
    assert created["approvedBy"] is None

    listing = client.get(
        f"/api/files/user/{student.id}", headers=student_headers
    )
    assert listing.status_code == 200
    assert listing.json()["count"] == 1
    assert listing.json()["files"][0]["id"] == created["id"]


def test_cannot_list_other_users_files(client, other_student, student_headers):
    response = client.get(
        f"/api/files/user/{other_student.id}", headers=student_headers
    )
    assert response.status_code == 403


def test_admin_routes_need_teacher(client, student_headers):
    assert client.get("/api/admin/submissions").status_code == 401
    response = client.get("/api/admin/submissions", headers=student_headers)
    assert response.status_code == 403


def test_admin_lists_submissions(
    client, db, student, other_student, teacher_headers
):
    submit(db, student)
    submit(db, other_student)

    response = client.get(
        "/api/admin/submissions",
        params={"status": "PENDING", "search": "le thi", "limit": 5},
        headers=teacher_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert len(body["submissions"]) == 1
    assert body["submissions"][0]["user"]["name"] == "Le Thi Binh"
    assert body["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalCount": 1,
        "limit": 5,
        "hasNextPage": False,
        "hasPrevPage": False,
    }

    everything = client.get(
        "/api/admin/submissions", params={"status": "ALL"}, headers=teacher_headers
    )
    assert everything.json()["pagination"]["totalCount"] == 2


def test_admin_rejects_bad_listing_params(client, teacher_headers):
    assert (
        client.get(
            "/api/admin/submissions", params={"page": 0}, headers=teacher_headers
        ).status_code
        == 400
    )
    assert (
        client.get(
            "/api/admin/submissions",
            params={"status": "DONE"},
            headers=teacher_headers,
        ).status_code
        == 400
    )


def test_admin_student_submission(client, db, student, teacher_headers):
    bad = client.get("/api/admin/student/not-a-uuid", headers=teacher_headers)
    assert bad.status_code == 400

    missing = client.get(
        f"/api/admin/student/{uuid.uuid4()}", headers=teacher_headers
    )
    assert missing.status_code == 404

    submission = submit(db, student)
    found = client.get(f"/api/admin/student/{student.id}", headers=teacher_headers)
    assert found.status_code == 200
    assert found.json()["success"] is True
    assert found.json()["submission"]["id"] == submission.id


def test_admin_download(client, db, student, teacher_headers):
    submission = submit(db, student)
    response = client.get(
        f"/api/admin/files/{submission.id}/download", headers=teacher_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["fileName"] == "cccd.pdf"
    assert body["mimeType"] == PDF
    assert body["studentName"] == student.name
    assert body["studentCccd"] == student.cccd
    assert "X-Amz-Expires=3600" in body["downloadUrl"]

    missing = client.get(
        f"/api/admin/files/{uuid.uuid4()}/download", headers=teacher_headers
    )
    assert missing.status_code == 404

    malformed = client.get(
        "/api/admin/files/not-a-uuid/download", headers=teacher_headers
    )
    assert malformed.status_code == 400
    assert malformed.json()["detail"] == "Invalid file ID format"


def test_approval_flow(client, db, student, teacher, teacher_headers):
    submission = submit(db, student)

    approved = client.put(
        "/api/admin/approval",
        json={"fileId": submission.id, "status": "APPROVED", "comment": "ok"},
        headers=teacher_headers,
    )
    assert approved.status_code == 200
    body = approved.json()
    assert body["success"] is True
    assert body["file"]["status"] == "APPROVED"
    assert body["file"]["approvedBy"] == teacher.id
    assert body["file"]["approvedAt"] is not None
    assert body["message"] == "Submission status updated to APPROVED"

    current = client.get(
        "/api/admin/approval",
        params={"fileId": submission.id},
        headers=teacher_headers,
    )
    assert current.status_code == 200
    assert current.json()["file"]["status"] == "APPROVED"

    reset = client.put(
        "/api/admin/approval",
        json={"fileId": submission.id, "status": "PENDING"},
        headers=teacher_headers,
    )
    assert reset.json()["file"]["approvedAt"] is None
    assert reset.json()["file"]["approvedBy"] is None

    db.expire_all()
    stored = db.get(Submission, submission.id)
    assert stored.approved_at is None and stored.approved_by is None


def test_approval_errors(client, db, student, teacher_headers):
    submission = submit(db, student)

    bad_status = client.put(
        "/api/admin/approval",
        json={"fileId": submission.id, "status": "ARCHIVED"},
        headers=teacher_headers,
    )
    assert bad_status.status_code == 400

    bad_id = client.put(
        "/api/admin/approval",
        json={"fileId": "123", "status": "APPROVED"},
        headers=teacher_headers,
    )
    assert bad_id.status_code == 400
    assert bad_id.json()["detail"] == "Invalid file ID format"

    missing = client.put(
        "/api/admin/approval",
        json={"fileId": str(uuid.uuid4()), "status": "APPROVED"},
        headers=teacher_headers,
    )
    assert missing.status_code == 404


def test_student_cannot_approve(client, db, student, student_headers):
    submission = submit(db, student)
    response = client.put(
        "/api/admin/approval",
        json={"fileId": submission.id, "status": "APPROVED"},
        headers=student_headers,
    )
    assert response.status_code == 403


def test_cookie_session_reaches_admin(client, teacher):
    client.post(
        "/login", json={"email": teacher.email, "password": TEACHER_PASSWORD}
    )
    assert client.get("/api/admin/submissions").status_code == 200
