"""
Work Package Blueprint.

Endpoints:
    GET    /api/v1/work-packages             all work packages
    GET    /api/v1/work-packages/<c.p.w>     one work package by WBS number
    POST   /api/v1/work-packages/edit        apply an accepted CR's edits
"""

from flask import Blueprint, jsonify, request

from finishline.models.wbs import WBS_ELEMENT_STATUSES
from finishline.services import work_package_service
from finishline.services.transformers import work_package_transformer
from finishline.utils.helpers import parse_date
from finishline.utils.validation import RequestValidator

work_package_bp = Blueprint("work_packages", __name__, url_prefix="/api/v1/work-packages")


@work_package_bp.route("", methods=["GET"])
def list_work_packages():
    work_packages = work_package_service.list_work_packages()
    return jsonify([work_package_transformer(wp) for wp in work_packages]), 200


@work_package_bp.route("/<wbs_num>", methods=["GET"])
def get_work_package(wbs_num):
    work_package = work_package_service.get_work_package(wbs_num)
    return jsonify(work_package_transformer(work_package)), 200


@work_package_bp.route("/edit", methods=["POST"])
def edit_work_package():
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("userId")
    v.int_min("workPackageId")
    v.int_min("crId")
    v.non_empty_string("name")
    v.int_min("projectLead", optional=True)
    v.int_min("projectManager", optional=True)
    v.date("startDate")
    v.int_min("duration")
    v.one_of("wbsElementStatus", WBS_ELEMENT_STATUSES)
    v.wbs_num_list("dependencies")
    v.bullet_list("expectedActivities")
    v.bullet_list("deliverables")
    v.raise_if_invalid()

    work_package_service.edit_work_package(
        user_id=data["userId"],
        work_package_id=data["workPackageId"],
        cr_id=data["crId"],
        name=data["name"],
        project_lead_id=data.get("projectLead"),
        project_manager_id=data.get("projectManager"),
        start_date=parse_date(data["startDate"]),
        duration=data["duration"],
        status=data["wbsElementStatus"],
        dependencies=data["dependencies"],
        expected_activities=data["expectedActivities"],
        deliverables=data["deliverables"],
    )
    return jsonify({"message": "Successfully edited work package."}), 200
