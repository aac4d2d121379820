"""
Project, user and health endpoint tests.
"""

import pytest

from conftest import add_bullet, create_project, create_standard_cr, create_work_package
from finishline.models import db
from finishline.models.change import Change
from finishline.models.wbs import DescriptionBullet, Project, WbsElement

# ═════════════════════════════════════════════════════════════════════════════
# PROJECTS
# ═════════════════════════════════════════════════════════════════════════════


class TestProjects:
    def test_list(self, client, project):
        other = create_project(car=1, number=1, name="Accumulator")
        res = client.get("/api/v1/projects")
        assert res.status_code == 200
        assert [p["id"] for p in res.get_json()] == [other.id, project.id]

    def test_get(self, client, project, work_package):
        create_work_package(project, number=2, name="Busbars", start_date=work_package.start_date, duration=6)
        res = client.get("/api/v1/projects/1.2.0")
        assert res.status_code == 200
        data = res.get_json()
        assert data["name"] == "Battery Box"
        assert data["status"] == "Active"
        assert data["duration"] == 6
        assert data["team"]["slackId"] == "C0JUSTICE"
        assert data["projectLead"]["role"] == "LEADERSHIP"
        assert [wp["name"] for wp in data["workPackages"]] == ["Cell Layout", "Busbars"]

    @pytest.mark.parametrize("wbs,message", [
        ("x.y.z", "x.y.z is not a valid WBS #!"),
        ("1.2.1", "1.2.1 is not a valid project WBS #!"),
        ("4.4.0", "project 4.4.0 not found!"),
    ])
    def test_get_not_found(self, client, project, work_package, wbs, message):
        res = client.get(f"/api/v1/projects/{wbs}")
        assert res.status_code == 404
        assert res.get_json()["message"] == message


# ═════════════════════════════════════════════════════════════════════════════
# CREATE / EDIT
# ═════════════════════════════════════════════════════════════════════════════


@pytest.fixture()
def accepted_cr(users, project):
    return create_standard_cr(users["MEMBER"], project.wbs_element, accepted=True)


def _new_body(users, cr, **overrides):
    body = {
        "userId": users["MEMBER"].id,
        "crId": cr.id,
        "name": "Steering Wheel",
        "carNumber": 1,
        "summary": "Quick-release wheel with paddles",
    }
    body.update(overrides)
    return body


def _project_edit_body(users, project, cr, **overrides):
    body = {
        "userId": users["MEMBER"].id,
        "projectId": project.id,
        "crId": cr.id,
        "name": "Battery Box",
        "budget": 1000,
        "summary": "Battery Box summary",
        "rules": ["EV3.5.2"],
        "goals": [],
        "features": [],
        "otherConstraints": [],
        "wbsElementStatus": "ACTIVE",
    }
    body.update(overrides)
    return body


class TestCreateProject:
    def test_next_number_within_car(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/new", json=_new_body(users, accepted_cr))

        assert res.status_code == 200
        assert res.get_json() == {"wbsNumber": {"carNumber": 1, "projectNumber": 3, "workPackageNumber": 0}}
        element = db.session.query(WbsElement).filter_by(car_number=1, project_number=3).one()
        assert element.name == "Steering Wheel"
        assert element.status == "INACTIVE"
        assert element.project.summary == "Quick-release wheel with paddles"
        assert [(c.detail, c.change_request_id) for c in element.changes] == [
            ("New Project Created", accepted_cr.id),
        ]

    def test_first_project_in_car(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/new", json=_new_body(users, accepted_cr, carNumber=2))
        assert res.status_code == 200
        assert res.get_json()["wbsNumber"] == {"carNumber": 2, "projectNumber": 1, "workPackageNumber": 0}

    @pytest.mark.parametrize("override,param", [
        ({"userId": -1}, "userId"),
        ({"crId": "asdf"}, "crId"),
        ({"name": ""}, "name"),
        ({"carNumber": -3}, "carNumber"),
    ])
    def test_validation(self, client, users, accepted_cr, override, param):
        res = client.post("/api/v1/projects/new", json=_new_body(users, accepted_cr, **override))
        assert res.status_code == 400
        assert [e["param"] for e in res.get_json()["errors"]] == [param]

    def test_pending_cr_rejected(self, client, users, project):
        cr = create_standard_cr(users["MEMBER"], project.wbs_element)
        res = client.post("/api/v1/projects/new", json=_new_body(users, cr))
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_CONFLICT_STATE"
        assert db.session.query(Project).count() == 1

    def test_guest_rejected(self, client, users, accepted_cr):
        res = client.post("/api/v1/projects/new", json=_new_body(users, accepted_cr, userId=users["GUEST"].id))
        assert res.status_code == 401

    def test_unknown_cr_404(self, client, users, accepted_cr):
        res = client.post("/api/v1/projects/new", json=_new_body(users, accepted_cr, crId=999))
        assert res.status_code == 404


class TestEditProject:
    def test_edit_writes_audit_trail(self, client, users, project, accepted_cr):
        goal = add_bullet(project, "Fit in chassis", kind="goals")
        feature = add_bullet(project, "Air cooled", kind="features")

        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr,
            name="Battery Box v2",
            budget=1200,
            rules=["EV3.5.2", "EV4.1"],
            goals=[{"id": goal.id, "detail": "Fit in 2026 chassis"}],
            features=[{"id": 0, "detail": "Hot-swap modules"}],
            googleDriveFolderLink="https://drive.example/bb",
            projectLead=users["MEMBER"].id,
        ))

        assert res.status_code == 200
        assert res.get_json() == {"message": "Successfully edited project."}
        assert [c.detail for c in db.session.query(Change).order_by(Change.id)] == [
            'Changed name from "Battery Box" to "Battery Box v2"',
            'Changed budget from "1000" to "1200"',
            'Added google drive folder link "https://drive.example/bb"',
            'Changed project lead from "Leadership User" to "Member User"',
            'Added new rule "EV4.1"',
            'Changed goal from "Fit in chassis" to "Fit in 2026 chassis"',
            'Removed feature "Air cooled"',
            'Added new feature "Hot-swap modules"',
        ]

        db.session.refresh(project)
        assert project.wbs_element.name == "Battery Box v2"
        assert project.wbs_element.project_lead_id == users["MEMBER"].id
        assert project.budget == 1200
        assert project.rules == ["EV3.5.2", "EV4.1"]
        assert project.google_drive_folder_link == "https://drive.example/bb"
        assert db.session.get(DescriptionBullet, goal.id).detail == "Fit in 2026 chassis"
        assert db.session.get(DescriptionBullet, feature.id).date_deleted is not None
        live = [b.detail for b in project.features if not b.is_deleted]
        assert live == ["Hot-swap modules"]

    def test_unchanged_edit_writes_nothing(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(users, project, accepted_cr))
        assert res.status_code == 200
        assert db.session.query(Change).count() == 0

    def test_removed_rule_audited(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr, rules=[],
        ))
        assert res.status_code == 200
        assert [c.detail for c in db.session.query(Change)] == ['Removed rule "EV3.5.2"']

    @pytest.mark.parametrize("features,param", [
        ([{"id": 4}], "features[0].detail"),
        ([{"id": -1, "detail": "alsdjf"}], "features[0].id"),
        ([{"id": 4, "detail": ""}], "features[0].detail"),
        ([{"id": 4, "detail": "a"}, {"id": 4, "detail": "b"}], "features[1].id"),
    ])
    def test_invalid_feature(self, client, users, project, accepted_cr, features, param):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr, features=features,
        ))
        assert res.status_code == 400
        assert [e["param"] for e in res.get_json()["errors"]] == [param]

    def test_pending_cr_rejected(self, client, users, project):
        cr = create_standard_cr(users["MEMBER"], project.wbs_element)
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(users, project, cr, budget=5))
        assert res.status_code == 400
        db.session.refresh(project)
        assert project.budget == 1000

    def test_guest_rejected(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr, userId=users["GUEST"].id,
        ))
        assert res.status_code == 401

    def test_unknown_project_404(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr, projectId=777,
        ))
        assert res.status_code == 404

    def test_unknown_manager_404_rolls_back(self, client, users, project, accepted_cr):
        res = client.post("/api/v1/projects/edit", json=_project_edit_body(
            users, project, accepted_cr, name="Renamed", projectManager=999,
        ))
        assert res.status_code == 404
        assert db.session.query(Change).count() == 0
        db.session.refresh(project)
        assert project.wbs_element.name == "Battery Box"


# ═════════════════════════════════════════════════════════════════════════════
# USERS
# ═════════════════════════════════════════════════════════════════════════════


class TestUsers:
    def test_list(self, client, users):
        res = client.get("/api/v1/users")
        assert res.status_code == 200
        assert [u["role"] for u in res.get_json()] == ["GUEST", "MEMBER", "LEADERSHIP", "ADMIN", "APP_ADMIN"]

    def test_get(self, client, users):
        res = client.get(f"/api/v1/users/{users['ADMIN'].id}")
        assert res.status_code == 200
        assert res.get_json()["firstName"] == "Admin"

    def test_get_missing(self, client):
        res = client.get("/api/v1/users/404")
        assert res.status_code == 404
        assert res.get_json() == {"message": "User #404 not found", "code": "ERR_NOT_FOUND"}


# ═════════════════════════════════════════════════════════════════════════════
# HEALTH
# ═════════════════════════════════════════════════════════════════════════════


class TestHealth:
    def test_ready(self, client):
        res = client.get("/api/v1/health/ready")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok"}

    def test_live(self, client):
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "ok"
        assert body["checks"]["app"]["name"] == "FinishLine"

    def test_request_id_headers(self, client):
        res = client.get("/api/v1/health/ready", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        assert "X-Request-Duration-Ms" in res.headers

    def test_unknown_route_json_404(self, client):
        res = client.get("/api/v1/nope")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"
