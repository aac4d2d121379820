"""
Shared pytest fixtures for the FinishLine test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - users: one user per role, keyed by role name
    - team / project / work_package: the 1.2.0 project and its 1.2.1 package
    - notifier: patched Slack notifier (no outbound calls)
"""

from datetime import date
from unittest.mock import patch

import pytest

from finishline import create_app
from finishline.models import db as _db
from finishline.models.change_request import (
    ActivationChangeRequest,
    ChangeRequest,
    ChangeRequestExplanation,
    ProposedSolution,
    ScopeChangeRequest,
    StageGateChangeRequest,
)
from finishline.models.user import ROLES, Team, User
from finishline.models.wbs import DescriptionBullet, Project, WbsElement, WorkPackage
from finishline.services.notification import slack_notifier


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield _db.session
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def notifier():
    """Replace the Slack notifier's send method with a mock."""
    with patch.object(slack_notifier, "send_change_request_notification") as mocked:
        mocked.return_value = True
        yield mocked


# ── Factories ────────────────────────────────────────────────────────────


def create_user(role="MEMBER", first_name="Test", last_name=None, email=None):
    last_name = last_name or role.title()
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name}.{last_name}.{role}@husky.neu.edu".lower(),
        role=role,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


def create_project(car=1, number=2, name="Battery Box", team=None, lead=None, manager=None,
                   status="ACTIVE"):
    element = WbsElement(
        car_number=car, project_number=number, work_package_number=0, name=name, status=status,
        project_lead_id=lead.id if lead else None,
        project_manager_id=manager.id if manager else None,
    )
    _db.session.add(element)
    _db.session.flush()
    project = Project(wbs_element_id=element.id, budget=1000, summary=f"{name} summary",
                      rules=["EV3.5.2"], team_id=team.id if team else None)
    _db.session.add(project)
    _db.session.commit()
    return project


def create_work_package(project, number=1, name="Cell Layout", status="INACTIVE",
                        start_date=date(2026, 1, 5), duration=4, progress=0,
                        lead=None, manager=None):
    parent = project.wbs_element
    element = WbsElement(
        car_number=parent.car_number, project_number=parent.project_number,
        work_package_number=number, name=name, status=status,
        project_lead_id=lead.id if lead else None,
        project_manager_id=manager.id if manager else None,
    )
    _db.session.add(element)
    _db.session.flush()
    wp = WorkPackage(wbs_element_id=element.id, project_id=project.id, order_in_project=number,
                     start_date=start_date, duration=duration, progress=progress)
    _db.session.add(wp)
    _db.session.commit()
    return wp


def add_bullet(owner, detail, kind="expected_activities", checked_by=None):
    """Attach a bullet to a work package or, for the project kinds, a project."""
    column = {
        "expected_activities": "work_package_id_expected_activities",
        "deliverables": "work_package_id_deliverables",
        "goals": "project_id_goals",
        "features": "project_id_features",
        "other_constraints": "project_id_other_constraints",
    }[kind]
    bullet = DescriptionBullet(detail=detail, **{column: owner.id})
    if checked_by is not None:
        from datetime import datetime, timezone
        bullet.date_time_checked = datetime.now(timezone.utc)
        bullet.user_checked_id = checked_by.id
    _db.session.add(bullet)
    _db.session.commit()
    return bullet


def create_activation_cr(submitter, element, lead, manager, start_date=date(2026, 1, 5)):
    cr = ChangeRequest(
        submitter_id=submitter.id, wbs_element_id=element.id, type="ACTIVATION",
        activation_change_request=ActivationChangeRequest(
            project_lead_id=lead.id, project_manager_id=manager.id,
            start_date=start_date, confirm_details=True,
        ),
    )
    _db.session.add(cr)
    _db.session.commit()
    return cr


def create_stage_gate_cr(submitter, element, leftover_budget=10):
    cr = ChangeRequest(
        submitter_id=submitter.id, wbs_element_id=element.id, type="STAGE_GATE",
        stage_gate_change_request=StageGateChangeRequest(leftover_budget=leftover_budget, confirm_done=True),
    )
    _db.session.add(cr)
    _db.session.commit()
    return cr


def create_standard_cr(submitter, element, cr_type="ISSUE", what="Bigger cells", accepted=None):
    cr = ChangeRequest(
        submitter_id=submitter.id, wbs_element_id=element.id, type=cr_type, accepted=accepted,
        scope_change_request=ScopeChangeRequest(
            what=what, scope_impact="", timeline_impact=0, budget_impact=0,
            why=[ChangeRequestExplanation(type="DESIGN", explain="Cells grew")],
        ),
    )
    _db.session.add(cr)
    _db.session.commit()
    return cr


def add_proposed_solution(cr, creator, description="Use 21700 cells"):
    solution = ProposedSolution(
        scope_change_request_id=cr.scope_change_request.id, description=description,
        scope_impact="box grows 2cm", timeline_impact=1, budget_impact=50,
        created_by_id=creator.id,
    )
    _db.session.add(solution)
    _db.session.commit()
    return solution


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def users():
    """One user per role, keyed by role name."""
    return {role: create_user(role=role, first_name=role.title(), last_name="User") for role in ROLES}


@pytest.fixture()
def team(users):
    team = Team(team_name="Justice League", slack_id="C0JUSTICE", leader_id=users["LEADERSHIP"].id)
    _db.session.add(team)
    _db.session.commit()
    return team


@pytest.fixture()
def project(users, team):
    """Project 1.2.0 owned by the team."""
    return create_project(team=team, lead=users["LEADERSHIP"], manager=users["ADMIN"])


@pytest.fixture()
def work_package(project):
    """Work package 1.2.1, inactive, no lead or manager."""
    return create_work_package(project)
