from flask import Flask, jsonify

from circulation.config import Config
from circulation.extensions import db, jwt, migrate


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # model modules must be imported before create_all / migrations
    from circulation import models  # noqa: F401

    from circulation.controllers.book_controller import book_bp
    from circulation.controllers.circulation_controller import circulation_bp
    from circulation.controllers.member_controller import member_bp
    from circulation.controllers.report_controller import report_bp
    app.register_blueprint(circulation_bp, url_prefix="/circulation")
    app.register_blueprint(member_bp, url_prefix="/members")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(report_bp, url_prefix="/reports")

    from circulation.commands import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from circulation.tasks.scheduler import start_scheduler

    @app.before_request
    def _ensure_scheduler():
        start_scheduler(app)

    return app
