"""
Demo data for a fresh FinishLine database.

Safe to run multiple times: rows are matched on their natural keys
(user email, team name, WBS number) and only missing ones are inserted.

Call from the ``flask seed-demo`` CLI command.
"""

import logging
from datetime import date

from finishline.models import db
from finishline.models.user import Team, User
from finishline.models.wbs import DescriptionBullet, Project, WbsElement, WorkPackage

logger = logging.getLogger(__name__)

_USERS = [
    {"first_name": "Thomas", "last_name": "Emrax", "email": "emrax.t@husky.neu.edu", "role": "APP_ADMIN"},
    {"first_name": "Joe", "last_name": "Shmoe", "email": "shmoe.j@husky.neu.edu", "role": "ADMIN"},
    {"first_name": "Joe", "last_name": "Blow", "email": "blow.j@husky.neu.edu", "role": "LEADERSHIP"},
    {"first_name": "Bruce", "last_name": "Wayne", "email": "wayne.b@husky.neu.edu", "role": "MEMBER"},
    {"first_name": "Diana", "last_name": "Prince", "email": "prince.d@husky.neu.edu", "role": "MEMBER"},
    {"first_name": "Clark", "last_name": "Kent", "email": "kent.c@husky.neu.edu", "role": "GUEST"},
]

_TEAMS = [
    {"team_name": "Justice League", "slack_id": "C0JUSTICE", "leader": "blow.j@husky.neu.edu"},
]

_PROJECTS = [
    {
        "wbs": (1, 1, 0), "name": "Impact Attenuator", "budget": 124, "team": "Justice League",
        "summary": "Design and build the impact attenuator for the new car.",
        "lead": "wayne.b@husky.neu.edu", "manager": "shmoe.j@husky.neu.edu",
        "goals": ["Pass the rules-mandated drop test"],
        "features": ["Crushable honeycomb core"],
        "work_packages": [
            {"wbs": (1, 1, 1), "name": "Bodywork Concept", "start": date(2026, 1, 5), "duration": 3,
             "status": "ACTIVE", "activities": ["Sketch concepts"], "deliverables": ["Concept review deck"]},
            {"wbs": (1, 1, 2), "name": "Adhesive Shear Strength Test", "start": date(2026, 2, 2),
             "duration": 5, "status": "INACTIVE", "activities": ["Build test jig"],
             "deliverables": ["Test report"]},
        ],
    },
    {
        "wbs": (1, 2, 0), "name": "Battery Box", "budget": 3000, "team": "Justice League",
        "summary": "Accumulator container for the electric powertrain.",
        "lead": "prince.d@husky.neu.edu", "manager": "shmoe.j@husky.neu.edu",
        "goals": ["Hold 300 cells"], "features": ["Quick-release mounts"],
        "work_packages": [
            {"wbs": (1, 2, 1), "name": "Cell Layout", "start": date(2026, 1, 12), "duration": 4,
             "status": "INACTIVE", "activities": ["Model cell stack"], "deliverables": ["Layout drawing"]},
        ],
    },
]


def _get_or_create(model, lookup: dict, **values):
    row = model.query.filter_by(**lookup).first()
    if row:
        return row, False
    row = model(**lookup, **values)
    db.session.add(row)
    db.session.flush()
    return row, True


def _wbs_element(wbs: tuple, name: str, **values):
    car, project, work_package = wbs
    return _get_or_create(
        WbsElement,
        {"car_number": car, "project_number": project, "work_package_number": work_package},
        name=name, **values,
    )


def seed_demo_data() -> dict:
    """Insert demo users, teams, projects and work packages. Returns per-kind insert counts."""
    counts = {"users": 0, "teams": 0, "projects": 0, "work_packages": 0}

    users = {}
    for data in _USERS:
        user, created = _get_or_create(User, {"email": data["email"]},
                                       **{k: v for k, v in data.items() if k != "email"})
        users[user.email] = user
        counts["users"] += created

    teams = {}
    for data in _TEAMS:
        team, created = _get_or_create(Team, {"team_name": data["team_name"]},
                                       slack_id=data["slack_id"], leader_id=users[data["leader"]].id)
        teams[team.team_name] = team
        counts["teams"] += created

    for data in _PROJECTS:
        element, created = _wbs_element(
            data["wbs"], data["name"], status="ACTIVE",
            project_lead_id=users[data["lead"]].id, project_manager_id=users[data["manager"]].id,
        )
        if created:
            project = Project(wbs_element_id=element.id, budget=data["budget"],
                              summary=data["summary"], team_id=teams[data["team"]].id, rules=[])
            db.session.add(project)
            db.session.flush()
            for detail in data["goals"]:
                db.session.add(DescriptionBullet(detail=detail, project_id_goals=project.id))
            for detail in data["features"]:
                db.session.add(DescriptionBullet(detail=detail, project_id_features=project.id))
            counts["projects"] += 1
        else:
            project = element.project

        for order, wp_data in enumerate(data["work_packages"]):
            wp_element, created = _wbs_element(wp_data["wbs"], wp_data["name"], status=wp_data["status"])
            if not created:
                continue
            work_package = WorkPackage(wbs_element_id=wp_element.id, project_id=project.id,
                                       order_in_project=order, start_date=wp_data["start"],
                                       duration=wp_data["duration"])
            db.session.add(work_package)
            db.session.flush()
            for detail in wp_data["activities"]:
                db.session.add(DescriptionBullet(detail=detail,
                                                 work_package_id_expected_activities=work_package.id))
            for detail in wp_data["deliverables"]:
                db.session.add(DescriptionBullet(detail=detail,
                                                 work_package_id_deliverables=work_package.id))
            counts["work_packages"] += 1

    db.session.flush()
    logger.info("Seeded demo data: %s", counts)
    return counts
