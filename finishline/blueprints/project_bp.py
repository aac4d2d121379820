"""
Project Blueprint.

Endpoints:
    GET    /api/v1/projects            all projects
    GET    /api/v1/projects/<c.p.0>    one project by WBS number
    POST   /api/v1/projects/new        create a project under an accepted CR
    POST   /api/v1/projects/edit       apply an accepted CR's edits
"""

from flask import Blueprint, jsonify, request

from finishline.models.wbs import WBS_ELEMENT_STATUSES
from finishline.services import project_service
from finishline.services.transformers import project_transformer
from finishline.utils.validation import RequestValidator

project_bp = Blueprint("projects", __name__, url_prefix="/api/v1/projects")

_LINK_KEYS = ("googleDriveFolderLink", "slideDeckLink", "bomLink", "taskListLink")


@project_bp.route("", methods=["GET"])
def list_projects():
    return jsonify([project_transformer(p) for p in project_service.list_projects()]), 200


@project_bp.route("/<wbs_num>", methods=["GET"])
def get_project(wbs_num):
    return jsonify(project_transformer(project_service.get_project(wbs_num))), 200


@project_bp.route("/new", methods=["POST"])
def create_project():
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("userId")
    v.int_min("crId")
    v.non_empty_string("name")
    v.int_min("carNumber")
    v.non_empty_string("summary")
    v.raise_if_invalid()

    element = project_service.create_project(
        user_id=data["userId"],
        cr_id=data["crId"],
        name=data["name"],
        car_number=data["carNumber"],
        summary=data["summary"],
    )
    return jsonify({"wbsNumber": {
        "carNumber": element.car_number,
        "projectNumber": element.project_number,
        "workPackageNumber": element.work_package_number,
    }}), 200


@project_bp.route("/edit", methods=["POST"])
def edit_project():
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("userId")
    v.int_min("projectId")
    v.int_min("crId")
    v.non_empty_string("name")
    v.int_min("budget")
    v.non_empty_string("summary")
    v.string_list("rules")
    v.bullet_list("goals", min_id=0)
    v.bullet_list("features", min_id=0)
    v.bullet_list("otherConstraints", min_id=0)
    v.one_of("wbsElementStatus", WBS_ELEMENT_STATUSES)
    for key in _LINK_KEYS:
        v.string(key, optional=True)
    v.int_min("projectLead", optional=True)
    v.int_min("projectManager", optional=True)
    v.raise_if_invalid()

    project_service.edit_project(
        user_id=data["userId"],
        project_id=data["projectId"],
        cr_id=data["crId"],
        name=data["name"],
        budget=data["budget"],
        summary=data["summary"],
        rules=data["rules"],
        goals=data["goals"],
        features=data["features"],
        other_constraints=data["otherConstraints"],
        status=data["wbsElementStatus"],
        links={key: data.get(key) for key in _LINK_KEYS},
        project_lead_id=data.get("projectLead"),
        project_manager_id=data.get("projectManager"),
    )
    return jsonify({"message": "Successfully edited project."}), 200
