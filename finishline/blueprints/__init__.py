"""
FinishLine
Blueprint registry.
"""

from finishline.blueprints.change_request_bp import change_request_bp
from finishline.blueprints.description_bullet_bp import description_bullet_bp
from finishline.blueprints.health_bp import health_bp
from finishline.blueprints.project_bp import project_bp
from finishline.blueprints.user_bp import user_bp
from finishline.blueprints.work_package_bp import work_package_bp

ALL_BLUEPRINTS = (
    change_request_bp,
    project_bp,
    work_package_bp,
    description_bullet_bp,
    user_bp,
    health_bp,
)


def register_blueprints(app):
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)
