"""
Change Request Blueprint.

Endpoints:
    GET    /api/v1/change-requests                      all CRs
    GET    /api/v1/change-requests/<cr_id>              one CR
    POST   /api/v1/change-requests/review               accept / deny a pending CR
    POST   /api/v1/change-requests/new/activation       activation CR
    POST   /api/v1/change-requests/new/stage-gate       stage gate CR
    POST   /api/v1/change-requests/new/standard         DEFINITION_CHANGE | ISSUE | OTHER
    POST   /api/v1/change-requests/new/proposed-solution

Layer contract:
    - Blueprint: validate body shape, call ChangeRequestService, return JSON.
    - Domain errors propagate to the app-level handlers in utils.errors.
"""

import logging

from flask import Blueprint, jsonify, request

from finishline.models.change_request import (
    CR_TYPE_ACTIVATION,
    CR_TYPE_STAGE_GATE,
    CR_WHY_TYPES,
    STANDARD_CR_TYPES,
)
from finishline.services.change_request_service import ChangeRequestService
from finishline.services.transformers import change_request_transformer
from finishline.utils.helpers import parse_date
from finishline.utils.validation import RequestValidator

logger = logging.getLogger(__name__)

change_request_bp = Blueprint("change_requests", __name__, url_prefix="/api/v1/change-requests")


def _new_cr_validator(cr_types) -> tuple[RequestValidator, dict]:
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("submitterId")
    v.wbs_num("wbsNum")
    v.one_of("type", cr_types)
    return v, data


# ── Queries ──────────────────────────────────────────────────────────────────


@change_request_bp.route("", methods=["GET"])
def list_change_requests():
    crs = ChangeRequestService().list_change_requests()
    return jsonify([change_request_transformer(cr) for cr in crs]), 200


@change_request_bp.route("/<int:cr_id>", methods=["GET"])
def get_change_request(cr_id):
    cr = ChangeRequestService().get_change_request(cr_id)
    return jsonify(change_request_transformer(cr)), 200


# ── Review ───────────────────────────────────────────────────────────────────


@change_request_bp.route("/review", methods=["POST"])
def review_change_request():
    """Body: reviewerId, crId, reviewNotes, accepted, psId?"""
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("reviewerId")
    v.int_min("crId")
    v.string("reviewNotes")
    v.boolean("accepted")
    v.int_min("psId", optional=True)
    v.raise_if_invalid()

    cr = ChangeRequestService().review(
        reviewer_id=data["reviewerId"],
        cr_id=data["crId"],
        accepted=data["accepted"],
        review_notes=data["reviewNotes"],
        ps_id=data.get("psId"),
    )
    return jsonify({"message": f"Change request #{cr.id} successfully reviewed."}), 200


# ── Creation ─────────────────────────────────────────────────────────────────


@change_request_bp.route("/new/activation", methods=["POST"])
def create_activation_change_request():
    v, data = _new_cr_validator((CR_TYPE_ACTIVATION,))
    v.int_min("projectLeadId")
    v.int_min("projectManagerId")
    v.date("startDate")
    v.boolean("confirmDetails")
    v.raise_if_invalid()

    cr = ChangeRequestService().create_activation(
        submitter_id=data["submitterId"],
        wbs_num=data["wbsNum"],
        project_lead_id=data["projectLeadId"],
        project_manager_id=data["projectManagerId"],
        start_date=parse_date(data["startDate"]),
        confirm_details=data["confirmDetails"],
    )
    return jsonify({"message": f"Successfully created activation change request #{cr.id}."}), 200


@change_request_bp.route("/new/stage-gate", methods=["POST"])
def create_stage_gate_change_request():
    v, data = _new_cr_validator((CR_TYPE_STAGE_GATE,))
    v.int_min("leftoverBudget")
    v.boolean("confirmDone")
    v.raise_if_invalid()

    cr = ChangeRequestService().create_stage_gate(
        submitter_id=data["submitterId"],
        wbs_num=data["wbsNum"],
        leftover_budget=data["leftoverBudget"],
        confirm_done=data["confirmDone"],
    )
    return jsonify({"message": f"Successfully created stage gate change request #{cr.id}."}), 200


@change_request_bp.route("/new/standard", methods=["POST"])
def create_standard_change_request():
    v, data = _new_cr_validator(STANDARD_CR_TYPES)
    v.non_empty_string("what")
    v.int_min("budgetImpact", optional=True)
    why = v.array("why")
    for i, item in enumerate(why or []):
        v.one_of("type", CR_WHY_TYPES, source=item, label=f"why[{i}].type")
        v.non_empty_string("explain", source=item, label=f"why[{i}].explain")
    v.raise_if_invalid()

    cr = ChangeRequestService().create_standard(
        submitter_id=data["submitterId"],
        wbs_num=data["wbsNum"],
        cr_type=data["type"],
        what=data["what"],
        why=why,
        budget_impact=data.get("budgetImpact"),
    )
    return jsonify({"message": f"Successfully created standard change request #{cr.id}."}), 200


@change_request_bp.route("/new/proposed-solution", methods=["POST"])
def add_proposed_solution():
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("submitterId")
    v.int_min("crId")
    v.non_empty_string("description")
    v.non_empty_string("scopeImpact")
    v.int_min("timelineImpact")
    v.int_min("budgetImpact")
    v.raise_if_invalid()

    solution = ChangeRequestService().add_proposed_solution(
        submitter_id=data["submitterId"],
        cr_id=data["crId"],
        description=data["description"],
        scope_impact=data["scopeImpact"],
        timeline_impact=data["timelineImpact"],
        budget_impact=data["budgetImpact"],
    )
    return jsonify({"message": f"Successfully created the proposed solution #{solution.id}"}), 200
