from fastapi.testclient import TestClient
from tests.helpers.asserts import api_call, assert_error
from tests.helpers.auth import auth_headers


def test_tenant_admin_video_list_cache_cycle(client: TestClient, caches, tenancy, video_factory):
    admin = tenancy["users"]["institute_admin"]
    video_factory(institute=tenancy["institutes"]["b"], category="addition")
    headers = auth_headers(admin)
    params = {"category": "addition"}

    first = api_call(client, "GET", "/videos/", headers=headers, params=params)
    assert [v["id"] for v in first["data"]["items"]] == [tenancy["videos"]["a1_active"].id]
    assert caches.query.miss_count == 1
    assert caches.query.hit_count == 0

    second = api_call(client, "GET", "/videos/", headers=headers, params=params)
    assert second["data"] == first["data"]
    assert caches.query.hit_count == 1
    assert caches.query.miss_count == 1

    created = api_call(
        client,
        "POST",
        "/videos/",
        headers=headers,
        json={"title": "Adding tens", "youtube_video_id": "dQw4w9WgXcQ", "category": "addition"},
        expected_status=201,
    )
    assert created["data"]["institute_id"] == tenancy["institutes"]["a1"].id
    assert created["data"]["embed_url"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    third = api_call(client, "GET", "/videos/", headers=headers, params=params)
    assert caches.query.miss_count == 2
    assert third["data"]["total"] == 2
    assert created["data"]["id"] in [v["id"] for v in third["data"]["items"]]


def test_learner_categories_are_public_and_filters_are_checked_first(client: TestClient, caches, tenancy):
    headers = auth_headers(tenancy["users"]["student"])

    body = api_call(client, "GET", "/videos/categories", headers=headers)
    assert body["data"]["categories"] == ["addition", "division", "multiplication"]
    assert caches.public.miss_count == 1

    rejected = api_call(client, "GET", "/videos/categories", headers=headers, params={"institute_id": 99}, expected_status=403)
    assert_error(rejected, "SCOPE_FORBIDDEN")
    assert caches.public.miss_count == 1
    assert caches.public.hit_count == 0
    assert len(caches.public) == 1

    rejected = api_call(client, "GET", "/videos/", headers=headers, params={"institute_id": 99}, expected_status=403)
    assert_error(rejected, "SCOPE_FORBIDDEN")
    assert len(caches.query) == 0


def test_callers_with_different_scope_never_share_entries(client: TestClient, caches, tenancy):
    users = tenancy["users"]
    admin_view = api_call(client, "GET", "/videos/", headers=auth_headers(users["institute_admin"]))
    student_view = api_call(client, "GET", "/videos/", headers=auth_headers(users["student"]))

    assert caches.query.hit_count == 0
    assert caches.query.miss_count == 2
    assert admin_view["data"]["total"] == 2
    assert student_view["data"]["total"] == 3


def test_write_clears_stats_and_dependent_analytics(client: TestClient, caches, tenancy):
    headers = auth_headers(tenancy["users"]["super_admin"])
    api_call(client, "GET", "/videos/stats", headers=headers)
    api_call(client, "GET", "/analytics/dashboard", headers=headers)
    api_call(client, "GET", "/users/stats", headers=headers)
    assert len(caches.stats) == 3

    video_id = tenancy["videos"]["library"].id
    api_call(client, "PUT", f"/videos/{video_id}", headers=headers, json={"status": "inactive"})

    # Only the user statistics survive a video write.
    assert len(caches.stats) == 1
    dashboard = api_call(client, "GET", "/analytics/dashboard", headers=headers)
    assert dashboard["data"]["active_videos"] == 2


def test_out_of_scope_detail_looks_missing_and_is_not_cached(client: TestClient, caches, tenancy):
    headers = auth_headers(tenancy["users"]["institute_admin"])
    outside = tenancy["videos"]["b_active"].id

    body = api_call(client, "GET", f"/videos/{outside}", headers=headers, expected_status=404)
    assert_error(body, "NOT_FOUND")
    api_call(client, "GET", "/videos/999999", headers=headers, expected_status=404)
    assert len(caches.query) == 0

    own = tenancy["videos"]["a1_active"].id
    api_call(client, "GET", f"/videos/{own}", headers=headers)
    api_call(client, "GET", f"/videos/{own}", headers=headers)
    assert caches.query.hit_count == 1


def test_zone_manager_video_updates_use_the_broadened_rule(client: TestClient, tenancy):
    headers = auth_headers(tenancy["users"]["zone_manager"])
    outside_zone = tenancy["videos"]["b_active"].id
    body = api_call(client, "GET", f"/videos/{outside_zone}", headers=headers)
    assert body["data"]["id"] == outside_zone

    result = api_call(
        client, "PATCH", "/videos/bulk-status", headers=headers,
        json={"ids": [outside_zone], "is_active": False},
    )
    assert result["data"]["processed_count"] == 1
