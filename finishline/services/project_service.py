"""
FinishLine
Project queries, creation and the CR-driven edit.

Both writes need an accepted change request. A new project takes the next
free project number within its car; an edit records every moved field in the
audit trail inside the same transaction.
"""

import logging

from sqlalchemy import func

from finishline.core.exceptions import NotFoundError
from finishline.models import db
from finishline.models.change import write_changes
from finishline.models.wbs import Project, WbsElement
from finishline.services.change_diff import (
    ChangeTarget,
    create_change_non_list,
    create_description_bullet_changes,
)
from finishline.services.change_request_service import find_wbs_element, get_accepted_change_request
from finishline.services.description_bullet_service import apply_bullet_diff
from finishline.services.permission import require_privilege
from finishline.services.user_service import get_user_full_name, get_user_or_404
from finishline.utils.helpers import parse_wbs_num, transaction

logger = logging.getLogger(__name__)

# (body key, model attribute, audit label)
_LINK_FIELDS = (
    ("googleDriveFolderLink", "google_drive_folder_link", "google drive folder link"),
    ("slideDeckLink", "slide_deck_link", "slide deck link"),
    ("bomLink", "bom_link", "bom link"),
    ("taskListLink", "task_list_link", "task list link"),
)

# (model relationship, owner column on DescriptionBullet, audit label)
_BULLET_LISTS = (
    ("goals", "project_id_goals", "goal"),
    ("features", "project_id_features", "feature"),
    ("other_constraints", "project_id_other_constraints", "other constraint"),
)


# ═════════════════════════════════════════════════════════════════════════════
# Queries
# ═════════════════════════════════════════════════════════════════════════════


def list_projects(session=None) -> list[Project]:
    session = session or db.session
    return (
        session.query(Project)
        .join(WbsElement, Project.wbs_element_id == WbsElement.id)
        .order_by(WbsElement.car_number, WbsElement.project_number)
        .all()
    )


def get_project(wbs_string: str, session=None) -> Project:
    """Look up a project by ``c.p.0``; anything else is a 404."""
    try:
        wbs_num = parse_wbs_num(wbs_string)
    except ValueError as exc:
        raise NotFoundError("Project", wbs_string, message=str(exc)) from exc
    if wbs_num["workPackageNumber"] != 0:
        raise NotFoundError("Project", wbs_string, message=f"{wbs_string} is not a valid project WBS #!")

    element = find_wbs_element(wbs_num, session)
    if element is None or element.project is None:
        raise NotFoundError("Project", wbs_string, message=f"project {wbs_string} not found!")
    return element.project


def get_highest_project_number(car_number: int, session=None) -> int:
    """Largest project number used in a car, 0 when the car has none."""
    session = session or db.session
    highest = (
        session.query(func.max(WbsElement.project_number))
        .filter(WbsElement.car_number == car_number, WbsElement.work_package_number == 0)
        .scalar()
    )
    return highest or 0


# ═════════════════════════════════════════════════════════════════════════════
# Create
# ═════════════════════════════════════════════════════════════════════════════


def create_project(*, user_id: int, cr_id: int, name: str, car_number: int, summary: str,
                   session=None) -> WbsElement:
    """Create an inactive project as ``car.<next>.0`` under an accepted CR.

    Raises:
        NotFoundError: user or change request missing.
        ForbiddenError: user is a guest.
        StateConflictError: CR not accepted.
    """
    session = session or db.session
    user = get_user_or_404(user_id, session)
    require_privilege(user, "MEMBER")
    cr = get_accepted_change_request(cr_id, session)

    project_number = get_highest_project_number(car_number, session) + 1

    with transaction(session):
        element = WbsElement(
            car_number=car_number,
            project_number=project_number,
            work_package_number=0,
            name=name,
            status="INACTIVE",
        )
        session.add(element)
        session.flush()
        session.add(Project(wbs_element_id=element.id, summary=summary, budget=0, rules=[]))
        write_changes([ChangeTarget(cr.id, user.id, element.id).entry("New Project Created")], session)

    logger.info("Project %s created via CR #%s", element.wbs_string, cr.id,
                extra={"cr_id": cr.id, "wbs_num": element.wbs_string, "user_id": user.id})
    return element


# ═════════════════════════════════════════════════════════════════════════════
# Edit
# ═════════════════════════════════════════════════════════════════════════════


def _rule_changes(old_rules: list[str], new_rules: list[str], target: ChangeTarget) -> list[dict]:
    changes = [target.entry(f'Removed rule "{r}"') for r in old_rules if r not in new_rules]
    changes += [target.entry(f'Added new rule "{r}"') for r in new_rules if r not in old_rules]
    return changes


def edit_project(
    *,
    user_id: int,
    project_id: int,
    cr_id: int,
    name: str,
    budget: int,
    summary: str,
    rules: list[str],
    goals: list[dict],
    features: list[dict],
    other_constraints: list[dict],
    status: str,
    links: dict,
    project_lead_id: int | None,
    project_manager_id: int | None,
    session=None,
) -> Project:
    """Apply an accepted change request's edits to a project.

    ``links`` maps the camelCase link keys to their new value (None clears).
    ``goals``, ``features`` and ``other_constraints`` are ``{id, detail}``
    lists diffed against the live bullets.

    Raises:
        NotFoundError: user, project, change request, lead or manager missing.
        ForbiddenError: user is a guest.
        StateConflictError: CR not accepted.
    """
    session = session or db.session
    user = get_user_or_404(user_id, session)
    require_privilege(user, "MEMBER")

    project = session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    cr = get_accepted_change_request(cr_id, session)

    element = project.wbs_element
    target = ChangeTarget(cr.id, user.id, element.id)

    changes = [
        create_change_non_list("name", element.name, name, target),
        create_change_non_list("budget", project.budget, budget, target),
        create_change_non_list("summary", project.summary, summary, target),
        create_change_non_list("status", element.status, status, target),
    ]
    for key, attr, label in _LINK_FIELDS:
        old_value, new_value = getattr(project, attr), links.get(key)
        if old_value != new_value:
            changes.append(create_change_non_list(label, old_value, new_value, target))
    if project_lead_id is not None and project_lead_id != element.project_lead_id:
        get_user_or_404(project_lead_id, session)
        changes.append(create_change_non_list(
            "project lead",
            get_user_full_name(element.project_lead_id, session),
            get_user_full_name(project_lead_id, session),
            target,
        ))
    if project_manager_id is not None and project_manager_id != element.project_manager_id:
        get_user_or_404(project_manager_id, session)
        changes.append(create_change_non_list(
            "project manager",
            get_user_full_name(element.project_manager_id, session),
            get_user_full_name(project_manager_id, session),
            target,
        ))
    changes = [c for c in changes if c]

    changes += _rule_changes(list(project.rules or []), rules, target)

    new_lists = {"goals": goals, "features": features, "other_constraints": other_constraints}
    bullet_updates = []
    for relationship, owner_column, label in _BULLET_LISTS:
        live = [b for b in getattr(project, relationship) if not b.is_deleted]
        diff = create_description_bullet_changes(live, new_lists[relationship], target, label)
        changes += diff.changes
        bullet_updates.append((diff, live, owner_column))

    with transaction(session):
        element.name = name
        element.status = status
        if project_lead_id is not None:
            element.project_lead_id = project_lead_id
        if project_manager_id is not None:
            element.project_manager_id = project_manager_id
        project.budget = budget
        project.summary = summary
        project.rules = list(rules)
        for key, attr, _ in _LINK_FIELDS:
            setattr(project, attr, links.get(key))
        for diff, live, owner_column in bullet_updates:
            apply_bullet_diff(diff, live, owner_column, project.id, session)
        write_changes(changes, session)

    logger.info("Project %s edited via CR #%s: %d changes",
                element.wbs_string, cr.id, len(changes),
                extra={"cr_id": cr.id, "wbs_num": element.wbs_string, "user_id": user.id})
    return project
