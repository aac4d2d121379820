"""
Description bullet check-off API tests.
"""

from datetime import datetime, timezone

from conftest import add_bullet
from finishline.models import db

URL = "/api/v1/description-bullets/check"


class TestCheckBullet:
    def test_check_then_uncheck(self, client, users, work_package):
        bullet = add_bullet(work_package, "Model cell stack")
        body = {"userId": users["MEMBER"].id, "descriptionId": bullet.id}

        res = client.post(URL, json=body)
        assert res.status_code == 200
        data = res.get_json()
        assert data["id"] == bullet.id
        assert data["userChecked"]["id"] == users["MEMBER"].id
        assert data["dateTimeChecked"] is not None

        res = client.post(URL, json=body)
        assert res.status_code == 200
        assert res.get_json()["dateTimeChecked"] is None
        assert res.get_json()["userChecked"] is None

    def test_progress_follows_checks(self, client, users, work_package):
        first = add_bullet(work_package, "Model cell stack")
        add_bullet(work_package, "Cell drawing", kind="deliverables")

        client.post(URL, json={"userId": users["MEMBER"].id, "descriptionId": first.id})

        res = client.get("/api/v1/work-packages/1.2.1")
        assert res.get_json()["progress"] == 50

    def test_deleted_bullet_400(self, client, users, work_package):
        bullet = add_bullet(work_package, "Old step")
        bullet.date_deleted = datetime.now(timezone.utc)
        db.session.commit()

        res = client.post(URL, json={"userId": users["MEMBER"].id, "descriptionId": bullet.id})
        assert res.status_code == 400
        assert res.get_json()["message"] == "Cannot check a deleted description bullet"

    def test_unknown_bullet_404(self, client, users):
        res = client.post(URL, json={"userId": users["MEMBER"].id, "descriptionId": 999})
        assert res.status_code == 404

    def test_guest_401(self, client, users, work_package):
        bullet = add_bullet(work_package, "Model cell stack")
        res = client.post(URL, json={"userId": users["GUEST"].id, "descriptionId": bullet.id})
        assert res.status_code == 401

    def test_validation(self, client):
        res = client.post(URL, json={"userId": "me"})
        assert res.status_code == 400
        assert {e["param"] for e in res.get_json()["errors"]} == {"userId", "descriptionId"}
