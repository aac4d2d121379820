"""
FinishLine: entity converters.

Pure mappings from ORM rows to the camelCase JSON shapes the front end
consumes. Nothing here touches the session beyond reading already-loaded
relationships, and nothing raises.

Derived fields:
    progress          floor(100 × checked / all live bullets), 0 without bullets
    endDate           startDate + duration weeks
    expectedProgress  share of the schedule elapsed at ``today``
    timelineStatus    progress compared with expectedProgress
"""

from datetime import date, datetime, timedelta, timezone

# ── Vocabulary ───────────────────────────────────────────────────────────────

_STATUS_NAMES = {
    "INACTIVE": "Inactive",
    "ACTIVE": "Active",
    "COMPLETE": "Complete",
}

TIMELINE_AHEAD = "AHEAD"
TIMELINE_ON_TRACK = "ON_TRACK"
TIMELINE_BEHIND = "BEHIND"
TIMELINE_VERY_BEHIND = "VERY_BEHIND"

# Percentage-point bands around the expected progress
_TIMELINE_BAND = 10
_TIMELINE_FAR_BAND = 30


def _iso(value):
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _today() -> date:
    return datetime.now(timezone.utc).date()


# ── Small shapes ─────────────────────────────────────────────────────────────


def wbs_num_of(element) -> dict:
    return {
        "carNumber": element.car_number,
        "projectNumber": element.project_number,
        "workPackageNumber": element.work_package_number,
    }


def convert_status(status: str) -> str:
    return _STATUS_NAMES[status]


def user_transformer(user) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "emailId": user.email_id,
        "role": user.role,
    }


def description_bullet_transformer(bullet) -> dict:
    return {
        "id": bullet.id,
        "detail": bullet.detail,
        "dateAdded": _iso(bullet.date_added),
        "dateDeleted": _iso(bullet.date_deleted),
        "dateTimeChecked": _iso(bullet.date_time_checked),
        "userChecked": user_transformer(bullet.user_checked),
    }


def change_transformer(change) -> dict:
    return {
        "changeId": change.id,
        "changeRequestId": change.change_request_id,
        "wbsNum": wbs_num_of(change.wbs_element),
        "implementer": user_transformer(change.implementer),
        "detail": change.detail,
        "dateImplemented": _iso(change.date_implemented),
    }


def team_transformer(team) -> dict | None:
    if team is None:
        return None
    return {
        "teamId": team.id,
        "teamName": team.team_name,
        "slackId": team.slack_id,
        "leader": user_transformer(team.leader),
    }


# ── Schedule maths ───────────────────────────────────────────────────────────


def _live(bullets):
    return [b for b in bullets if b.date_deleted is None]


def calculate_work_package_progress(deliverables, expected_activities) -> int:
    """Percentage of live bullets that are checked, floored."""
    bullets = _live(deliverables) + _live(expected_activities)
    if not bullets:
        return 0
    checked = sum(1 for b in bullets if b.date_time_checked is not None)
    return (checked * 100) // len(bullets)


def calculate_end_date(start_date: date, duration_weeks: int) -> date:
    return start_date + timedelta(weeks=duration_weeks)


def calculate_expected_progress(start_date: date, duration_weeks: int, status: str,
                                today: date | None = None) -> int:
    if status == "INACTIVE":
        return 0
    if status == "COMPLETE":
        return 100
    today = today or _today()
    total_days = duration_weeks * 7
    if total_days <= 0:
        return 100 if today >= start_date else 0
    elapsed = (today - start_date).days
    return max(0, min(100, round(elapsed * 100 / total_days)))


def calculate_timeline_status(progress: int, expected_progress: int) -> str:
    if progress >= expected_progress + _TIMELINE_BAND:
        return TIMELINE_AHEAD
    if progress >= expected_progress - _TIMELINE_BAND:
        return TIMELINE_ON_TRACK
    if progress >= expected_progress - _TIMELINE_FAR_BAND:
        return TIMELINE_BEHIND
    return TIMELINE_VERY_BEHIND


def calculate_project_duration(work_packages) -> int:
    """Weeks from the earliest work package start to the latest end."""
    if not work_packages:
        return 0
    start = min(wp.start_date for wp in work_packages)
    end = max(calculate_end_date(wp.start_date, wp.duration) for wp in work_packages)
    return (end - start).days // 7


# ── Aggregates ───────────────────────────────────────────────────────────────


def _wbs_element_fields(element) -> dict:
    return {
        "wbsNum": wbs_num_of(element),
        "dateCreated": _iso(element.date_created),
        "name": element.name,
        "status": convert_status(element.status),
        "projectLead": user_transformer(element.project_lead),
        "projectManager": user_transformer(element.project_manager),
        "changes": [change_transformer(c) for c in element.changes],
    }


def work_package_transformer(wp, today: date | None = None) -> dict:
    element = wp.wbs_element
    progress = calculate_work_package_progress(wp.deliverables, wp.expected_activities)
    expected = calculate_expected_progress(wp.start_date, wp.duration, element.status, today)
    data = {"id": wp.id}
    data.update(_wbs_element_fields(element))
    data.update({
        "orderInProject": wp.order_in_project,
        "progress": progress,
        "startDate": _iso(wp.start_date),
        "duration": wp.duration,
        "endDate": _iso(calculate_end_date(wp.start_date, wp.duration)),
        "expectedProgress": expected,
        "timelineStatus": calculate_timeline_status(progress, expected),
        "dependencies": [wbs_num_of(dep) for dep in wp.dependencies],
        "expectedActivities": [description_bullet_transformer(b) for b in wp.expected_activities],
        "deliverables": [description_bullet_transformer(b) for b in wp.deliverables],
        "projectName": wp.project.wbs_element.name,
    })
    return data


def project_transformer(project, today: date | None = None) -> dict:
    data = {"id": project.id}
    data.update(_wbs_element_fields(project.wbs_element))
    data.update({
        "summary": project.summary,
        "budget": project.budget,
        "gDriveLink": project.google_drive_folder_link,
        "slideDeckLink": project.slide_deck_link,
        "bomLink": project.bom_link,
        "taskListLink": project.task_list_link,
        "rules": list(project.rules or []),
        "duration": calculate_project_duration(project.work_packages),
        "goals": [description_bullet_transformer(b) for b in project.goals],
        "features": [description_bullet_transformer(b) for b in project.features],
        "otherConstraints": [description_bullet_transformer(b) for b in project.other_constraints],
        "team": team_transformer(project.team),
        "workPackages": [work_package_transformer(wp, today) for wp in project.work_packages],
    })
    return data


def proposed_solution_transformer(solution) -> dict:
    return {
        "id": solution.id,
        "description": solution.description,
        "scopeImpact": solution.scope_impact,
        "timelineImpact": solution.timeline_impact,
        "budgetImpact": solution.budget_impact,
        "approved": solution.approved,
        "createdBy": user_transformer(solution.created_by),
        "dateCreated": _iso(solution.date_created),
    }


def change_request_transformer(cr) -> dict:
    """Common CR fields plus the fields of whichever extension row exists."""
    data = {
        "crId": cr.id,
        "wbsNum": wbs_num_of(cr.wbs_element),
        "submitter": user_transformer(cr.submitter),
        "dateSubmitted": _iso(cr.date_submitted),
        "type": cr.type,
        "reviewer": user_transformer(cr.reviewer),
        "reviewNotes": cr.review_notes,
        "accepted": cr.accepted,
        "dateReviewed": _iso(cr.date_reviewed),
        "implementedChanges": [change_transformer(c) for c in cr.changes],
    }

    activation = cr.activation_change_request
    if activation is not None:
        data.update({
            "projectLead": user_transformer(activation.project_lead),
            "projectManager": user_transformer(activation.project_manager),
            "startDate": _iso(activation.start_date),
            "confirmDetails": activation.confirm_details,
        })

    stage_gate = cr.stage_gate_change_request
    if stage_gate is not None:
        data.update({
            "leftoverBudget": stage_gate.leftover_budget,
            "confirmDone": stage_gate.confirm_done,
        })

    scope = cr.scope_change_request
    if scope is not None:
        data.update({
            "what": scope.what,
            "why": [{"type": why.type, "explain": why.explain} for why in scope.why],
            "scopeImpact": scope.scope_impact,
            "budgetImpact": scope.budget_impact,
            "timelineImpact": scope.timeline_impact,
            "proposedSolutions": [proposed_solution_transformer(ps) for ps in scope.proposed_solutions],
        })
    return data
