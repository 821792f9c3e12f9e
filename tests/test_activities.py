"""
Tests for activity catalog endpoints.
"""
from datetime import timedelta

from sportsmeet.clock import utcnow

from conftest import make_activity


def _payload(**overrides):
    now = utcnow()
    payload = {
        "title": "Evening basketball",
        "description": "Pickup games, all levels welcome",
        "location": "Downtown gym",
        "category": "basketball",
        "start_time": (now + timedelta(days=3)).isoformat(),
        "end_time": (now + timedelta(days=3, hours=2)).isoformat(),
        "price": "25.50",
        "max_participants": 12,
    }
    payload.update(overrides)
    return payload


class TestCreateActivity:
    """Test activity creation."""

    def test_create_activity(self, client, test_user, auth_headers):
        response = client.post("/api/activities", headers=auth_headers, json=_payload())
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["title"] == "Evening basketball"
        assert data["price"] == 25.5
        assert data["current_participants"] == 0
        assert data["status"] == "active"
        assert data["creator_id"] == test_user.id

    def test_create_requires_auth(self, client):
        response = client.post("/api/activities", json=_payload())
        assert response.status_code == 401

    def test_start_in_past_rejected(self, client, auth_headers):
        now = utcnow()
        response = client.post(
            "/api/activities",
            headers=auth_headers,
            json=_payload(
                start_time=(now - timedelta(hours=1)).isoformat(),
                end_time=(now + timedelta(hours=1)).isoformat(),
            ),
        )
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_start_after_end_rejected(self, client, auth_headers):
        now = utcnow()
        response = client.post(
            "/api/activities",
            headers=auth_headers,
            json=_payload(
                start_time=(now + timedelta(days=2)).isoformat(),
                end_time=(now + timedelta(days=1)).isoformat(),
            ),
        )
        assert response.status_code == 422
        assert "earlier" in response.json()["message"]

    def test_zero_capacity_rejected(self, client, auth_headers):
        response = client.post("/api/activities", headers=auth_headers, json=_payload(max_participants=0))
        assert response.status_code == 422

    def test_negative_price_rejected(self, client, auth_headers):
        response = client.post("/api/activities", headers=auth_headers, json=_payload(price="-1"))
        assert response.status_code == 422


class TestListActivities:
    """Test activity search and filters."""

    def _titles(self, response):
        return sorted(item["title"] for item in response.json()["data"]["items"])

    def test_category_aliases(self, client, db, test_user):
        make_activity(db, test_user, title="Soccer night", category="soccer")
        make_activity(db, test_user, title="Hoops", category="basketball")

        response = client.get("/api/activities", params={"category": "football"})
        assert self._titles(response) == ["Soccer night"]

        response = client.get("/api/activities", params={"category": "足球"})
        assert self._titles(response) == ["Soccer night"]

    def test_status_filter(self, client, db, test_user):
        now = utcnow()
        make_activity(db, test_user, title="Upcoming")
        make_activity(
            db, test_user, title="Running now",
            start_time=now - timedelta(hours=1), end_time=now + timedelta(hours=1),
        )
        make_activity(
            db, test_user, title="Finished",
            start_time=now - timedelta(days=1), end_time=now - timedelta(hours=20),
        )

        assert self._titles(client.get("/api/activities", params={"status": "open"})) == ["Upcoming"]
        assert self._titles(client.get("/api/activities", params={"status": "报名中"})) == ["Upcoming"]
        assert self._titles(client.get("/api/activities", params={"status": "in_progress"})) == ["Running now"]
        assert self._titles(client.get("/api/activities", params={"status": "completed"})) == ["Finished"]

    def test_unknown_status_rejected(self, client, db):
        response = client.get("/api/activities", params={"status": "someday"})
        assert response.status_code == 422

    def test_keyword_search(self, client, db, test_user):
        make_activity(db, test_user, title="Morning run", description="5k around the lake")
        make_activity(db, test_user, title="Tennis doubles", description="Bring a racket")

        response = client.get("/api/activities", params={"search": "lake"})
        assert self._titles(response) == ["Morning run"]

    def test_keyword_wildcards_match_literally(self, client, db, test_user):
        make_activity(db, test_user, title="100% effort sprints", description="Intervals")
        make_activity(db, test_user, title="Easy jog", description="Recovery pace")
        make_activity(db, test_user, title="Team_A scrimmage", description="Internal match")

        assert self._titles(client.get("/api/activities", params={"search": "%"})) == ["100% effort sprints"]
        assert self._titles(client.get("/api/activities", params={"search": "_"})) == ["Team_A scrimmage"]

    def test_date_range_overlap(self, client, db, test_user):
        now = utcnow()
        make_activity(db, test_user, title="Soon")
        make_activity(
            db, test_user, title="Later",
            start_time=now + timedelta(days=10), end_time=now + timedelta(days=10, hours=3),
        )

        response = client.get(
            "/api/activities",
            params={
                "start_date": (now + timedelta(days=5)).isoformat(),
                "end_date": (now + timedelta(days=15)).isoformat(),
            },
        )
        assert self._titles(response) == ["Later"]

    def test_pagination(self, client, db, test_user):
        for index in range(3):
            make_activity(db, test_user, title=f"Session {index}")

        response = client.get("/api/activities", params={"page": 1, "limit": 2})
        data = response.json()["data"]
        assert len(data["items"]) == 2
        assert data["total"] == 3
        assert data["total_pages"] == 2
        assert data["has_next"] is True

        response = client.get("/api/activities", params={"page": 2, "limit": 2})
        data = response.json()["data"]
        assert len(data["items"]) == 1
        assert data["has_prev"] is True

    def test_limit_above_maximum_rejected(self, client, db):
        response = client.get("/api/activities", params={"limit": 51})
        assert response.status_code == 422

    def test_deleted_activities_hidden(self, client, db, test_user):
        make_activity(db, test_user, title="Visible")
        make_activity(db, test_user, title="Gone", is_active=False)

        assert self._titles(client.get("/api/activities")) == ["Visible"]

    def test_my_created(self, client, db, test_user, other_user, auth_headers):
        make_activity(db, test_user, title="Mine")
        make_activity(db, other_user, title="Theirs")

        response = client.get("/api/activities/my/created", headers=auth_headers)
        assert [a["title"] for a in response.json()["data"]] == ["Mine"]


class TestSingleActivity:
    """Test reading, editing and deleting one activity."""

    def test_get_activity(self, client, activity):
        response = client.get(f"/api/activities/{activity.id}")
        assert response.json()["data"]["id"] == activity.id

    def test_get_missing_activity(self, client, db):
        response = client.get("/api/activities/9999")
        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["code"] == "NOT_FOUND"

    def test_get_deleted_activity(self, client, db, test_user):
        gone = make_activity(db, test_user, is_active=False)
        response = client.get(f"/api/activities/{gone.id}")
        assert response.json()["code"] == "NOT_FOUND"

    def test_owner_updates(self, client, activity, auth_headers):
        response = client.put(
            f"/api/activities/{activity.id}",
            headers=auth_headers,
            json={"title": "Renamed", "max_participants": 20},
        )
        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["max_participants"] == 20
        assert data["description"] == "Friendly match"

    def test_non_owner_cannot_update(self, client, activity, other_headers):
        response = client.put(
            f"/api/activities/{activity.id}",
            headers=other_headers,
            json={"title": "Hijacked"},
        )
        assert response.status_code == 200
        assert response.json()["code"] == "FORBIDDEN"

    def test_started_activity_only_allows_description_and_image(self, client, db, test_user, auth_headers):
        now = utcnow()
        started = make_activity(
            db, test_user,
            start_time=now - timedelta(minutes=30), end_time=now + timedelta(hours=1),
        )

        response = client.put(
            f"/api/activities/{started.id}", headers=auth_headers, json={"title": "Too late"}
        )
        assert response.json()["code"] == "INVALID_STATE"

        response = client.put(
            f"/api/activities/{started.id}",
            headers=auth_headers,
            json={"description": "Moved to pitch 2", "image_url": "https://example.com/p2.png"},
        )
        assert response.json()["success"] is True
        assert response.json()["data"]["description"] == "Moved to pitch 2"

    def test_explicit_null_clears_optional_fields(self, client, db, test_user, auth_headers):
        target = make_activity(
            db, test_user, image_url="https://example.com/pitch.png", requirements="Shin guards"
        )

        response = client.put(
            f"/api/activities/{target.id}",
            headers=auth_headers,
            json={"image_url": None, "requirements": None, "title": None},
        )
        data = response.json()["data"]
        assert data["image_url"] is None
        assert data["requirements"] is None
        assert data["title"] == "Sunday football"

    def test_capacity_cannot_drop_below_participants(self, client, db, test_user, auth_headers):
        busy = make_activity(db, test_user, current_participants=3)

        response = client.put(
            f"/api/activities/{busy.id}", headers=auth_headers, json={"max_participants": 2}
        )
        assert response.json()["code"] == "INVALID_STATE"

        response = client.put(
            f"/api/activities/{busy.id}", headers=auth_headers, json={"max_participants": 3}
        )
        assert response.json()["data"]["max_participants"] == 3

    def test_reschedule_into_past_rejected(self, client, activity, auth_headers):
        response = client.put(
            f"/api/activities/{activity.id}",
            headers=auth_headers,
            json={"start_time": (utcnow() - timedelta(days=1)).isoformat()},
        )
        assert response.status_code == 422

    def test_soft_delete(self, client, db, activity, auth_headers):
        response = client.delete(f"/api/activities/{activity.id}", headers=auth_headers)
        assert response.json()["success"] is True

        response = client.get(f"/api/activities/{activity.id}")
        assert response.json()["code"] == "NOT_FOUND"

        db.refresh(activity)
        assert activity.is_active is False

    def test_non_owner_cannot_delete(self, client, activity, other_headers):
        response = client.delete(f"/api/activities/{activity.id}", headers=other_headers)
        assert response.json()["code"] == "FORBIDDEN"

    def test_attendee_list(self, client, activity, other_user, other_headers):
        client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})

        response = client.get(f"/api/activities/{activity.id}/registrations")
        attendees = response.json()["data"]
        assert len(attendees) == 1
        assert attendees[0]["user"]["username"] == "otheruser"
