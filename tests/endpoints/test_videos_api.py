import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from app.models.video import Video
from tests.helpers.asserts import api_call, assert_error
from tests.helpers.auth import auth_headers


def _cached_namespaces(caches) -> set:
    return {
        entry["key"].split(":", 1)[0]
        for cache in caches
        for entry in cache.get_entries(len(cache))
    }


def _warm_video_reads(client: TestClient, caches, headers):
    api_call(client, "GET", "/videos/", headers=headers)
    api_call(client, "GET", "/videos/stats", headers=headers)
    api_call(client, "GET", "/analytics/dashboard", headers=headers)
    api_call(client, "GET", "/zones/", headers=headers)
    assert {"videos", "analytics", "zones"} <= _cached_namespaces(caches)


def _assert_video_namespaces_cleared(caches):
    namespaces = _cached_namespaces(caches)
    assert "videos" not in namespaces
    assert "analytics" not in namespaces
    assert "zones" in namespaces


@pytest.fixture
def admin_headers(tenancy):
    return auth_headers(tenancy["users"]["institute_admin"])


@pytest.fixture
def super_headers(tenancy):
    return auth_headers(tenancy["users"]["super_admin"])


def test_institute_admin_deletes_own_video(client: TestClient, caches, tenancy, admin_headers, db_session: Session):
    video_id = tenancy["videos"]["a1_active"].id
    _warm_video_reads(client, caches, admin_headers)

    api_call(client, "DELETE", f"/videos/{video_id}", headers=admin_headers)

    _assert_video_namespaces_cleared(caches)
    db_session.expire_all()
    assert db_session.query(Video).filter(Video.id == video_id).first() is None
    body = api_call(client, "GET", f"/videos/{video_id}", headers=admin_headers, expected_status=404)
    assert_error(body, "NOT_FOUND")


def test_delete_out_of_scope_video_is_not_found(client: TestClient, caches, tenancy, admin_headers, db_session: Session):
    video_id = tenancy["videos"]["b_active"].id
    _warm_video_reads(client, caches, admin_headers)

    body = api_call(client, "DELETE", f"/videos/{video_id}", headers=admin_headers, expected_status=404)
    assert_error(body, "NOT_FOUND")
    assert "videos" in _cached_namespaces(caches)
    db_session.expire_all()
    assert db_session.query(Video).filter(Video.id == video_id).first() is not None


def test_duplicate_youtube_id_conflicts(client: TestClient, caches, tenancy, admin_headers):
    existing = tenancy["videos"]["b_active"].youtube_video_id
    _warm_video_reads(client, caches, admin_headers)

    body = api_call(
        client, "POST", "/videos/", headers=admin_headers,
        json={"title": "Copy", "youtube_video_id": existing},
        expected_status=409,
    )
    assert_error(body, "CONFLICT")
    assert {"videos", "analytics"} <= _cached_namespaces(caches)


def test_invalid_youtube_id_is_a_validation_error(client: TestClient, tenancy, admin_headers):
    body = api_call(
        client, "POST", "/videos/", headers=admin_headers,
        json={"title": "Bad", "youtube_video_id": "not a video"},
        expected_status=400,
    )
    assert_error(body, "VALIDATION_ERROR")


def test_super_admin_adds_platform_library_video(client: TestClient, caches, tenancy, super_headers):
    _warm_video_reads(client, caches, super_headers)

    body = api_call(
        client, "POST", "/videos/", headers=super_headers,
        json={"title": "Counting to ten", "youtube_video_id": "aaaaaaaaaaa", "category": "counting"},
        expected_status=201,
    )
    created = body["data"]
    assert created["institute_id"] is None
    assert created["status"] == "active"
    _assert_video_namespaces_cleared(caches)

    listing = api_call(client, "GET", "/videos/", headers=auth_headers(tenancy["users"]["student"]))
    assert created["id"] in [v["id"] for v in listing["data"]["items"]]
    admin_listing = api_call(client, "GET", "/videos/", headers=auth_headers(tenancy["users"]["institute_admin"]))
    assert created["id"] not in [v["id"] for v in admin_listing["data"]["items"]]


def test_institute_admin_cannot_create_for_another_institute(client: TestClient, caches, tenancy, admin_headers, db_session: Session):
    _warm_video_reads(client, caches, admin_headers)

    body = api_call(
        client, "POST", "/videos/", headers=admin_headers,
        json={"title": "Elsewhere", "youtube_video_id": "bbbbbbbbbbb", "institute_id": tenancy["institutes"]["b"].id},
        expected_status=403,
    )
    assert_error(body, "SCOPE_FORBIDDEN")
    assert {"videos", "analytics"} <= _cached_namespaces(caches)
    assert db_session.query(Video).filter(Video.youtube_video_id == "bbbbbbbbbbb").first() is None


def test_zone_manager_must_name_an_institute(client: TestClient, tenancy):
    headers = auth_headers(tenancy["users"]["zone_manager"])
    api_call(
        client, "POST", "/videos/", headers=headers,
        json={"title": "No home", "youtube_video_id": "ccccccccccc"},
        expected_status=400,
    )
    body = api_call(
        client, "POST", "/videos/", headers=headers,
        json={"title": "Other zone", "youtube_video_id": "ccccccccccc", "institute_id": tenancy["institutes"]["b"].id},
        expected_status=403,
    )
    assert_error(body, "SCOPE_FORBIDDEN")


def test_students_cannot_write_videos(client: TestClient, tenancy):
    headers = auth_headers(tenancy["users"]["student"])
    video_id = tenancy["videos"]["a1_active"].id
    api_call(client, "POST", "/videos/", headers=headers, json={"title": "No", "youtube_video_id": "ddddddddddd"}, expected_status=403)
    api_call(client, "PUT", f"/videos/{video_id}", headers=headers, json={"title": "No"}, expected_status=403)
    api_call(client, "DELETE", f"/videos/{video_id}", headers=headers, expected_status=403)
    api_call(client, "PATCH", "/videos/bulk-status", headers=headers, json={"ids": [video_id], "is_active": False}, expected_status=403)


def test_update_clears_video_namespaces(client: TestClient, caches, tenancy, admin_headers):
    video_id = tenancy["videos"]["a1_active"].id
    _warm_video_reads(client, caches, admin_headers)

    body = api_call(client, "PUT", f"/videos/{video_id}", headers=admin_headers, json={"title": "Adding ones"})
    assert body["data"]["title"] == "Adding ones"
    _assert_video_namespaces_cleared(caches)


def test_bulk_status_partial_authorization(client: TestClient, caches, tenancy, admin_headers, db_session: Session):
    videos = tenancy["videos"]
    own_id, other_id, library_id = videos["a1_inactive"].id, videos["b_active"].id, videos["library"].id
    ids = [own_id, other_id, library_id]
    _warm_video_reads(client, caches, admin_headers)

    body = api_call(client, "PATCH", "/videos/bulk-status", headers=admin_headers, json={"ids": ids, "is_active": True}, expected_status=403)
    assert_error(body, "PARTIAL_AUTHORIZATION")
    assert body["error"]["details"]["valid_ids"] == [own_id]
    assert body["error"]["details"]["invalid_ids"] == [other_id, library_id]
    assert {"videos", "analytics"} <= _cached_namespaces(caches)
    db_session.expire_all()
    assert db_session.query(Video).filter(Video.id == own_id).first().status == "inactive"

    body = api_call(
        client, "PATCH", "/videos/bulk-status", headers=admin_headers,
        json={"ids": ids, "is_active": True, "allow_partial": True},
    )
    assert body["data"] == {
        "processed_count": 1,
        "valid_ids": [own_id],
        "invalid_ids": [other_id, library_id],
        "invalid_count": 2,
    }
    _assert_video_namespaces_cleared(caches)
    db_session.expire_all()
    assert db_session.query(Video).filter(Video.id == own_id).first().status == "active"
    assert db_session.query(Video).filter(Video.id == other_id).first().status == "active"
