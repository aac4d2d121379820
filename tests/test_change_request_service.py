"""
ChangeRequestService unit tests with injected notifier and user lookup.
"""

from datetime import date
from unittest.mock import MagicMock, PropertyMock, patch

import pytest

from conftest import (
    add_proposed_solution,
    create_activation_cr,
    create_project,
    create_stage_gate_cr,
    create_standard_cr,
    create_work_package,
)
from finishline.core.exceptions import StateConflictError
from finishline.models import db
from finishline.models.change import Change
from finishline.models.change_request import ChangeRequest
from finishline.services.change_request_service import ChangeRequestService, enclosing_project


@pytest.fixture()
def mock_notifier():
    return MagicMock()


@pytest.fixture()
def service(mock_notifier):
    return ChangeRequestService(notifier=mock_notifier, user_lookup=lambda user_id: f"user-{user_id}")


class TestActivationReview:
    def test_only_moved_fields_are_audited(self, service, users, project):
        lead, new_lead, manager = users["MEMBER"], users["ADMIN"], users["GUEST"]
        wp = create_work_package(project, lead=lead, manager=manager, start_date=date(2026, 3, 2))
        cr = create_activation_cr(users["MEMBER"], wp.wbs_element, lead=new_lead, manager=manager,
                                  start_date=date(2026, 3, 2))

        service.review(reviewer_id=users["LEADERSHIP"].id, cr_id=cr.id, accepted=True, review_notes="")

        details = [c.detail for c in db.session.query(Change).order_by(Change.id)]
        assert details == [
            f'Changed project lead from "user-{lead.id}" to "user-{new_lead.id}"',
            'Changed status from "INACTIVE" to "ACTIVE"',
        ]
        assert wp.wbs_element.project_lead_id == new_lead.id
        assert wp.wbs_element.project_manager_id == manager.id

    def test_activation_on_project_skips_start_date(self, service, users, project):
        cr = create_activation_cr(users["MEMBER"], project.wbs_element,
                                  lead=users["LEADERSHIP"], manager=users["ADMIN"])

        service.review(reviewer_id=users["APP_ADMIN"].id, cr_id=cr.id, accepted=True, review_notes="")

        details = [c.detail for c in db.session.query(Change)]
        assert details == ['Changed status from "ACTIVE" to "ACTIVE"']


class TestStageGateReview:
    def test_already_complete_writes_nothing(self, service, users, project):
        wp = create_work_package(project, status="COMPLETE", progress=100)
        cr = create_stage_gate_cr(users["MEMBER"], wp.wbs_element)

        reviewed = service.review(reviewer_id=users["LEADERSHIP"].id, cr_id=cr.id,
                                  accepted=True, review_notes="done")

        assert reviewed.accepted is True
        assert db.session.query(Change).count() == 0

    def test_project_stage_gate_has_no_progress_entry(self, service, users, project):
        cr = create_stage_gate_cr(users["MEMBER"], project.wbs_element)
        service.review(reviewer_id=users["LEADERSHIP"].id, cr_id=cr.id, accepted=True, review_notes="")
        assert [c.detail for c in db.session.query(Change)] == [
            'Changed status from "ACTIVE" to "COMPLETE"',
        ]
        assert project.wbs_element.status == "COMPLETE"


class TestConcurrentReview:
    def test_lost_race_rolls_back(self, service, users, project):
        cr = create_standard_cr(users["MEMBER"], project.wbs_element)
        solution = add_proposed_solution(cr, users["MEMBER"])
        # another reviewer decided between our read and our write
        db.session.execute(
            ChangeRequest.__table__.update()
            .where(ChangeRequest.__table__.c.id == cr.id)
            .values(accepted=False, reviewer_id=users["ADMIN"].id)
        )
        db.session.commit()

        with patch.object(ChangeRequest, "is_pending", new_callable=PropertyMock, return_value=True):
            with pytest.raises(StateConflictError, match="already been reviewed"):
                service.review(reviewer_id=users["LEADERSHIP"].id, cr_id=cr.id,
                               accepted=True, review_notes="", ps_id=solution.id)

        db.session.refresh(cr)
        db.session.refresh(solution)
        assert cr.accepted is False
        assert cr.reviewer_id == users["ADMIN"].id
        assert solution.approved is False
        assert db.session.query(Change).count() == 0


class TestNotifications:
    WBS = {"carNumber": 1, "projectNumber": 2, "workPackageNumber": 1}

    def test_stage_gate_notifies_enclosing_project_team(self, service, mock_notifier, users, team,
                                                         work_package):
        cr = service.create_stage_gate(submitter_id=users["MEMBER"].id, wbs_num=self.WBS,
                                       leftover_budget=0, confirm_done=True)

        mock_notifier.send_change_request_notification.assert_called_once_with(
            team, "Member User wants to stage gate Cell Layout in Battery Box", cr.id, None,
        )

    def test_notifier_exception_swallowed(self, service, mock_notifier, users, work_package):
        mock_notifier.send_change_request_notification.side_effect = ConnectionError("boom")

        cr = service.create_stage_gate(submitter_id=users["MEMBER"].id, wbs_num=self.WBS,
                                       leftover_budget=0, confirm_done=True)

        assert db.session.get(ChangeRequest, cr.id) is not None

    def test_no_team_no_notification(self, service, mock_notifier, users):
        project = create_project(car=2, number=3, name="Wiring")
        create_work_package(project, number=1)
        service.create_stage_gate(submitter_id=users["MEMBER"].id,
                                  wbs_num={"carNumber": 2, "projectNumber": 3, "workPackageNumber": 1},
                                  leftover_budget=0, confirm_done=True)
        mock_notifier.send_change_request_notification.assert_not_called()

    def test_enclosing_project(self, project, work_package):
        assert enclosing_project(work_package.wbs_element) is project
        assert enclosing_project(project.wbs_element) is project
