"""
FinishLine
Change-request lifecycle.

    create_activation / create_stage_gate / create_standard
        pending CR + its extension row, then a best-effort team notification
    add_proposed_solution
        only while the CR is pending
    review
        Pending → Accepted | Rejected, exactly once; acceptance applies the
        CR to its WBS element and writes the audit trail

Every state change runs inside one ``transaction()``. The review decision is
a conditional UPDATE on ``accepted IS NULL`` so concurrent reviews cannot
both win.

Usage:
    service = ChangeRequestService()
    cr = service.review(reviewer_id=3, cr_id=12, accepted=True, review_notes="ok", ps_id=4)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import update

from finishline.core.exceptions import ForbiddenError, NotFoundError, StateConflictError
from finishline.models import db
from finishline.models.change import write_changes
from finishline.models.change_request import (
    CR_TYPE_ACTIVATION,
    CR_TYPE_STAGE_GATE,
    ActivationChangeRequest,
    ChangeRequest,
    ChangeRequestExplanation,
    ProposedSolution,
    ScopeChangeRequest,
    StageGateChangeRequest,
)
from finishline.models.wbs import WbsElement
from finishline.services.change_diff import (
    ChangeTarget,
    build_change_detail,
    create_change_dates,
    create_change_non_list,
)
from finishline.services.notification import slack_notifier
from finishline.services.permission import require_privilege
from finishline.services.user_service import get_user_full_name, get_user_or_404
from finishline.utils.helpers import transaction

logger = logging.getLogger(__name__)


def find_wbs_element(wbs_num: dict, session=None) -> WbsElement | None:
    session = session or db.session
    return (
        session.query(WbsElement)
        .filter_by(
            car_number=wbs_num["carNumber"],
            project_number=wbs_num["projectNumber"],
            work_package_number=wbs_num["workPackageNumber"],
        )
        .first()
    )


def wbs_string_of(wbs_num: dict) -> str:
    return f"{wbs_num['carNumber']}.{wbs_num['projectNumber']}.{wbs_num['workPackageNumber']}"


def get_accepted_change_request(cr_id: int, session=None) -> ChangeRequest:
    """A CR that may be implemented: it exists and was accepted."""
    session = session or db.session
    cr = session.get(ChangeRequest, cr_id)
    if cr is None:
        raise NotFoundError("Change request", cr_id)
    if cr.accepted is not True:
        raise StateConflictError(f"Change request #{cr_id} must be accepted before it can be implemented")
    return cr


def enclosing_project(element: WbsElement):
    """The project an element belongs to (itself when it is a project)."""
    if element.work_package is not None:
        return element.work_package.project
    return element.project


class ChangeRequestService:
    """Change-request operations over an injected session, notifier and user lookup."""

    def __init__(self, session=None, notifier=None, user_lookup=None):
        self.session = session or db.session
        self.notifier = notifier or slack_notifier
        self.user_lookup = user_lookup or (lambda user_id: get_user_full_name(user_id, self.session))

    # ── Queries ──────────────────────────────────────────────────────────

    def list_change_requests(self) -> list[ChangeRequest]:
        return self.session.query(ChangeRequest).order_by(ChangeRequest.id).all()

    def get_change_request(self, cr_id: int) -> ChangeRequest:
        cr = self.session.get(ChangeRequest, cr_id)
        if not cr:
            raise NotFoundError("Change request", cr_id)
        return cr

    # ── Helpers ──────────────────────────────────────────────────────────

    def _get_submitter(self, submitter_id: int):
        user = get_user_or_404(submitter_id, self.session)
        require_privilege(user, "MEMBER")
        return user

    def _get_wbs_element(self, wbs_num: dict) -> WbsElement:
        element = find_wbs_element(wbs_num, self.session)
        if not element:
            raise NotFoundError("WBS element", wbs_string_of(wbs_num))
        return element

    def _notify(self, project, message: str, cr_id: int, budget_impact=None):
        """Best effort; the CR is already committed."""
        if project.team is None:
            return
        try:
            self.notifier.send_change_request_notification(project.team, message, cr_id, budget_impact)
        except Exception:
            logger.warning("Notification for CR #%s failed", cr_id, exc_info=True, extra={"cr_id": cr_id})

    def _create(self, submitter, element: WbsElement, cr_type: str, **extension) -> ChangeRequest:
        cr = ChangeRequest(submitter_id=submitter.id, wbs_element_id=element.id, type=cr_type, **extension)
        with transaction(self.session) as session:
            session.add(cr)
            session.flush()
        logger.info("CR #%s created type=%s wbs=%s by user=%s",
                    cr.id, cr_type, element.wbs_string, submitter.id,
                    extra={"cr_id": cr.id, "wbs_num": element.wbs_string, "user_id": submitter.id})
        return cr

    # ── Creation ─────────────────────────────────────────────────────────

    def create_activation(self, *, submitter_id, wbs_num, project_lead_id, project_manager_id,
                          start_date, confirm_details) -> ChangeRequest:
        submitter = self._get_submitter(submitter_id)
        element = self._get_wbs_element(wbs_num)
        get_user_or_404(project_lead_id, self.session)
        get_user_or_404(project_manager_id, self.session)

        cr = self._create(
            submitter, element, CR_TYPE_ACTIVATION,
            activation_change_request=ActivationChangeRequest(
                project_lead_id=project_lead_id,
                project_manager_id=project_manager_id,
                start_date=start_date,
                confirm_details=confirm_details,
            ),
        )
        project = enclosing_project(element)
        if project is not None:
            self._notify(
                project,
                f"{submitter.full_name} wants to activate {element.name} in {project.wbs_element.name}",
                cr.id,
            )
        return cr

    def create_stage_gate(self, *, submitter_id, wbs_num, leftover_budget, confirm_done) -> ChangeRequest:
        submitter = self._get_submitter(submitter_id)
        element = self._get_wbs_element(wbs_num)

        cr = self._create(
            submitter, element, CR_TYPE_STAGE_GATE,
            stage_gate_change_request=StageGateChangeRequest(
                leftover_budget=leftover_budget,
                confirm_done=confirm_done,
            ),
        )
        project = enclosing_project(element)
        if project is not None:
            self._notify(
                project,
                f"{submitter.full_name} wants to stage gate {element.name} in {project.wbs_element.name}",
                cr.id,
            )
        return cr

    def create_standard(self, *, submitter_id, wbs_num, cr_type, what, why,
                        budget_impact=None) -> ChangeRequest:
        """DEFINITION_CHANGE / ISSUE / OTHER request with its "why" lines."""
        submitter = self._get_submitter(submitter_id)
        element = self._get_wbs_element(wbs_num)

        cr = self._create(
            submitter, element, cr_type,
            scope_change_request=ScopeChangeRequest(
                what=what,
                scope_impact="",
                timeline_impact=0,
                budget_impact=budget_impact or 0,
                why=[ChangeRequestExplanation(type=w["type"], explain=w["explain"]) for w in why],
            ),
        )
        project = enclosing_project(element)
        if project is not None:
            self._notify(
                project,
                f"{cr_type} CR submitted by {submitter.full_name} for the {project.wbs_element.name} project",
                cr.id,
                budget_impact,
            )
        return cr

    def add_proposed_solution(self, *, submitter_id, cr_id, description, scope_impact,
                              timeline_impact, budget_impact) -> ProposedSolution:
        submitter = self._get_submitter(submitter_id)
        cr = self.get_change_request(cr_id)
        if not cr.is_pending:
            raise StateConflictError("cannot create proposed solutions on a reviewed change request!")
        scope = cr.scope_change_request
        if scope is None:
            raise NotFoundError("Scope change request for change request", cr_id)

        solution = ProposedSolution(
            description=description,
            scope_impact=scope_impact,
            timeline_impact=timeline_impact,
            budget_impact=budget_impact,
            created_by_id=submitter.id,
        )
        with transaction(self.session) as session:
            scope.proposed_solutions.append(solution)
            session.flush()
        logger.info("Proposed solution #%s added to CR #%s", solution.id, cr_id, extra={"cr_id": cr_id})
        return solution

    # ── Review ───────────────────────────────────────────────────────────

    def review(self, *, reviewer_id, cr_id, accepted: bool, review_notes: str,
               ps_id: int | None = None) -> ChangeRequest:
        reviewer = get_user_or_404(reviewer_id, self.session)
        require_privilege(reviewer, "LEADERSHIP")
        cr = self.get_change_request(cr_id)
        if not cr.is_pending:
            raise StateConflictError(
                f"This change request is already {'approved' if cr.accepted else 'denied'}!"
            )
        if reviewer.id == cr.submitter_id:
            raise ForbiddenError(user_id=reviewer.id)

        solution = None
        scope = cr.scope_change_request
        if scope is not None and accepted:
            if ps_id is None:
                raise StateConflictError("No proposed solution selected for scope change request")
            solution = self.session.get(ProposedSolution, ps_id)
            if solution is None or solution.scope_change_request_id != scope.id:
                raise StateConflictError(
                    f"Proposed solution with id #{ps_id} not found for change request #{cr_id}"
                )

        with transaction(self.session) as session:
            if solution is not None:
                solution.approved = True
            result = session.execute(
                update(ChangeRequest)
                .where(ChangeRequest.id == cr_id, ChangeRequest.accepted.is_(None))
                .values(
                    accepted=accepted,
                    reviewer_id=reviewer.id,
                    review_notes=review_notes,
                    date_reviewed=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session="evaluate")
            )
            if result.rowcount != 1:
                raise StateConflictError("This change request has already been reviewed!")

            changes = []
            if accepted:
                target = ChangeTarget(cr.id, reviewer.id, cr.wbs_element_id)
                if cr.type == CR_TYPE_STAGE_GATE:
                    changes = self._apply_stage_gate(cr, target)
                elif cr.type == CR_TYPE_ACTIVATION and cr.activation_change_request is not None:
                    changes = self._apply_activation(cr, target)
            write_changes(changes, session)

        logger.info("CR #%s reviewed accepted=%s by user=%s changes=%d",
                    cr.id, accepted, reviewer.id, len(changes),
                    extra={"cr_id": cr.id, "user_id": reviewer.id})
        return cr

    def _apply_stage_gate(self, cr: ChangeRequest, target: ChangeTarget) -> list[dict]:
        element = cr.wbs_element
        work_package = element.work_package
        changes = []
        if element.status != "COMPLETE":
            changes.append(create_change_non_list("status", element.status, "COMPLETE", target))
        if work_package is not None and work_package.progress != 100:
            changes.append(create_change_non_list("progress", work_package.progress, 100, target))
            work_package.progress = 100
        element.status = "COMPLETE"
        return changes

    def _apply_activation(self, cr: ChangeRequest, target: ChangeTarget) -> list[dict]:
        activation = cr.activation_change_request
        element = cr.wbs_element
        work_package = element.work_package
        changes = []

        for label, attr in (("project lead", "project_lead_id"), ("project manager", "project_manager_id")):
            old_id, new_id = getattr(element, attr), getattr(activation, attr)
            if old_id != new_id:
                entry = create_change_non_list(label, self.user_lookup(old_id), self.user_lookup(new_id), target)
                if entry:
                    changes.append(entry)
            setattr(element, attr, new_id)

        if work_package is not None:
            entry = create_change_dates("start date", work_package.start_date, activation.start_date, target)
            if entry:
                changes.append(entry)
            work_package.start_date = activation.start_date

        changes.append(target.entry(build_change_detail("status", element.status, "ACTIVE")))
        element.status = "ACTIVE"
        return changes
