"""
Tests for joining and leaving activities.
"""
from datetime import timedelta

from sportsmeet.clock import utcnow
from sportsmeet.locks import _activity_locks
from sportsmeet.models import Registration, RegistrationStatus

from conftest import bearer, make_activity, make_user


def _participants(client, activity_id):
    return client.get(f"/api/activities/{activity_id}").json()["data"]["current_participants"]


class TestJoin:
    """Test registering for activities."""

    def test_join_activity(self, client, activity, other_headers, other_user):
        response = client.post(
            "/api/registrations",
            headers=other_headers,
            json={"activity_id": activity.id, "notes": "Bringing my own ball"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "confirmed"
        assert data["user_id"] == other_user.id
        assert data["order_id"] is None
        assert _participants(client, activity.id) == 1

    def test_join_requires_auth(self, client, activity):
        response = client.post("/api/registrations", json={"activity_id": activity.id})
        assert response.status_code == 401

    def test_duplicate_join(self, client, activity, other_headers):
        client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        assert response.json()["success"] is False
        assert response.json()["code"] == "DUPLICATE"
        assert _participants(client, activity.id) == 1

    def test_join_full_activity(self, client, db, test_user, other_headers):
        full = make_activity(db, test_user, max_participants=1, current_participants=1)
        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": full.id})
        assert response.json()["code"] == "CAPACITY"
        assert _participants(client, full.id) == 1

    def test_last_seat(self, client, db, test_user):
        small = make_activity(db, test_user, max_participants=2)
        first = make_user(db, "first")
        second = make_user(db, "second")
        third = make_user(db, "third")

        for user in (first, second):
            response = client.post("/api/registrations", headers=bearer(user), json={"activity_id": small.id})
            assert response.json()["success"] is True

        response = client.post("/api/registrations", headers=bearer(third), json={"activity_id": small.id})
        assert response.json()["code"] == "CAPACITY"
        assert _participants(client, small.id) == 2

    def test_join_started_activity(self, client, db, test_user, other_headers):
        now = utcnow()
        started = make_activity(
            db, test_user, start_time=now - timedelta(minutes=5), end_time=now + timedelta(hours=1)
        )
        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": started.id})
        assert response.json()["code"] == "INVALID_STATE"

    def test_join_cancelled_activity(self, client, activity, auth_headers, other_headers):
        client.put(f"/api/activities/{activity.id}", headers=auth_headers, json={"status": "cancelled"})
        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        assert response.json()["code"] == "INVALID_STATE"

    def test_join_missing_activity(self, client, db, other_headers):
        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": 9999})
        assert response.json()["code"] == "NOT_FOUND"

    def test_unknown_activities_do_not_accumulate_locks(self, client, db, other_headers):
        before = len(_activity_locks)
        for activity_id in range(10_000, 10_050):
            response = client.post(
                "/api/registrations", headers=other_headers, json={"activity_id": activity_id}
            )
            assert response.json()["code"] == "NOT_FOUND"
        assert len(_activity_locks) == before


class TestCancel:
    """Test leaving activities."""

    def test_cancel_and_rejoin(self, client, activity, other_headers):
        client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        assert _participants(client, activity.id) == 1

        response = client.delete(f"/api/registrations/activity/{activity.id}", headers=other_headers)
        assert response.json()["data"]["status"] == "cancelled"
        assert _participants(client, activity.id) == 0

        response = client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        assert response.json()["success"] is True
        assert _participants(client, activity.id) == 1

    def test_cancel_without_registration(self, client, activity, other_headers):
        response = client.delete(f"/api/registrations/activity/{activity.id}", headers=other_headers)
        assert response.json()["code"] == "NOT_FOUND"

    def test_cancel_after_start(self, client, db, test_user, other_user, other_headers):
        now = utcnow()
        started = make_activity(
            db, test_user,
            start_time=now - timedelta(minutes=5),
            end_time=now + timedelta(hours=1),
            current_participants=1,
        )
        db.add(Registration(user_id=other_user.id, activity_id=started.id, status=RegistrationStatus.CONFIRMED))
        db.commit()

        response = client.delete(f"/api/registrations/activity/{started.id}", headers=other_headers)
        assert response.json()["code"] == "INVALID_STATE"
        assert _participants(client, started.id) == 1

    def test_cancel_paid_registration_redirects_to_order(self, client, activity, other_headers):
        order = client.post("/api/orders", headers=other_headers, json={"activity_id": activity.id}).json()["data"]
        client.put(f"/api/orders/{order['order_number']}/pay", headers=other_headers)

        response = client.delete(f"/api/registrations/activity/{activity.id}", headers=other_headers)
        assert response.json()["code"] == "INVALID_STATE"
        assert _participants(client, activity.id) == 1


class TestRegistrationQueries:
    """Test registration listings."""

    def test_my_registrations(self, client, db, test_user, other_headers):
        first = make_activity(db, test_user, title="First")
        second = make_activity(db, test_user, title="Second")
        for target in (first, second):
            client.post("/api/registrations", headers=other_headers, json={"activity_id": target.id})

        response = client.get("/api/registrations/my", headers=other_headers)
        assert {r["activity_id"] for r in response.json()["data"]} == {first.id, second.id}

    def test_check_registration(self, client, activity, other_headers):
        url = f"/api/registrations/check/{activity.id}"
        assert client.get(url, headers=other_headers).json()["data"]["is_registered"] is False

        client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        assert client.get(url, headers=other_headers).json()["data"]["is_registered"] is True

    def test_activity_registrations_only_confirmed(self, client, db, activity, other_headers):
        third = make_user(db, "third")
        client.post("/api/registrations", headers=other_headers, json={"activity_id": activity.id})
        client.post("/api/registrations", headers=bearer(third), json={"activity_id": activity.id})
        client.delete(f"/api/registrations/activity/{activity.id}", headers=bearer(third))

        response = client.get(f"/api/registrations/activity/{activity.id}")
        assert [r["user"]["username"] for r in response.json()["data"]] == ["otheruser"]
