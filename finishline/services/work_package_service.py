"""
FinishLine
Work package queries and the CR-driven edit.

Editing is only allowed against an accepted change request; every field
that moves is written to the audit trail in the same transaction as the
edit itself.
"""

import logging

from finishline.core.exceptions import NotFoundError, StateConflictError
from finishline.models import db
from finishline.models.change import write_changes
from finishline.models.wbs import WbsElement, WorkPackage
from finishline.services.change_diff import (
    ChangeTarget,
    create_change_dates,
    create_change_non_list,
    create_dependency_changes,
    create_description_bullet_changes,
)
from finishline.services.change_request_service import (
    find_wbs_element,
    get_accepted_change_request,
    wbs_string_of,
)
from finishline.services.description_bullet_service import apply_bullet_diff
from finishline.services.permission import require_privilege
from finishline.services.user_service import get_user_full_name, get_user_or_404
from finishline.utils.helpers import parse_wbs_num, transaction

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════════
# Queries
# ═════════════════════════════════════════════════════════════════════════════


def list_work_packages(session=None) -> list[WorkPackage]:
    session = session or db.session
    return (
        session.query(WorkPackage)
        .join(WbsElement, WorkPackage.wbs_element_id == WbsElement.id)
        .order_by(WbsElement.car_number, WbsElement.project_number, WbsElement.work_package_number)
        .all()
    )


def get_work_package(wbs_string: str, session=None) -> WorkPackage:
    """Look up a work package by ``c.p.w``; malformed or project numbers are 404s."""
    try:
        wbs_num = parse_wbs_num(wbs_string)
    except ValueError as exc:
        raise NotFoundError("Work package", wbs_string, message=str(exc)) from exc
    if wbs_num["workPackageNumber"] == 0:
        raise NotFoundError("Work package", wbs_string,
                            message=f"{wbs_string} is not a valid work package WBS #!")

    element = find_wbs_element(wbs_num, session)
    if element is None or element.work_package is None:
        raise NotFoundError("Work package", wbs_string, message=f"work package {wbs_string} not found!")
    return element.work_package


# ═════════════════════════════════════════════════════════════════════════════
# Edit
# ═════════════════════════════════════════════════════════════════════════════


def _resolve_dependencies(work_package: WorkPackage, wbs_nums: list[dict], session) -> list[WbsElement]:
    elements = []
    for wbs_num in wbs_nums:
        element = find_wbs_element(wbs_num, session)
        if element is None:
            raise NotFoundError("WBS element", wbs_string_of(wbs_num))
        if element.id == work_package.wbs_element_id:
            raise StateConflictError("A Work Package cannot have own element as dependency")
        if element not in elements:
            elements.append(element)
    return elements


def edit_work_package(
    *,
    user_id: int,
    work_package_id: int,
    cr_id: int,
    name: str,
    project_lead_id: int | None,
    project_manager_id: int | None,
    start_date,
    duration: int,
    status: str,
    dependencies: list[dict],
    expected_activities: list[dict],
    deliverables: list[dict],
    session=None,
) -> WorkPackage:
    """Apply an accepted change request's edits to a work package.

    Raises:
        NotFoundError: user, work package, change request or dependency missing.
        ForbiddenError: user is a guest.
        StateConflictError: CR not accepted, or the package depends on itself.
    """
    session = session or db.session
    user = get_user_or_404(user_id, session)
    require_privilege(user, "MEMBER")

    work_package = session.get(WorkPackage, work_package_id)
    if work_package is None:
        raise NotFoundError("Work package", work_package_id)
    cr = get_accepted_change_request(cr_id, session)

    element = work_package.wbs_element
    new_dependencies = _resolve_dependencies(work_package, dependencies, session)
    target = ChangeTarget(cr.id, user.id, element.id)

    changes = [
        create_change_non_list("name", element.name, name, target),
        create_change_non_list("duration", work_package.duration, duration, target),
        create_change_non_list("status", element.status, status, target),
        create_change_dates("start date", work_package.start_date, start_date, target),
    ]
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

    changes += create_dependency_changes(
        [d.id for d in work_package.dependencies],
        [d.id for d in new_dependencies],
        target, "dependency", session,
    )

    live_activities = [b for b in work_package.expected_activities if not b.is_deleted]
    live_deliverables = [b for b in work_package.deliverables if not b.is_deleted]
    activity_diff = create_description_bullet_changes(
        live_activities, expected_activities, target, "expected activity",
    )
    deliverable_diff = create_description_bullet_changes(
        live_deliverables, deliverables, target, "deliverable",
    )
    changes += activity_diff.changes + deliverable_diff.changes

    with transaction(session):
        element.name = name
        element.status = status
        if project_lead_id is not None:
            element.project_lead_id = project_lead_id
        if project_manager_id is not None:
            element.project_manager_id = project_manager_id
        work_package.duration = duration
        work_package.start_date = start_date
        work_package.dependencies = new_dependencies
        apply_bullet_diff(activity_diff, live_activities,
                           "work_package_id_expected_activities", work_package.id, session)
        apply_bullet_diff(deliverable_diff, live_deliverables,
                           "work_package_id_deliverables", work_package.id, session)
        write_changes(changes, session)

    logger.info("Work package %s edited via CR #%s: %d changes",
                element.wbs_string, cr.id, len(changes),
                extra={"cr_id": cr.id, "wbs_num": element.wbs_string, "user_id": user.id})
    return work_package
