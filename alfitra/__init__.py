from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from alfitra.config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def create_app(test_config: dict | None = None) -> Flask:
    """
    Application factory for the Flask app.
    Loads environment variables, configures the database,
    and registers blueprints.
    """
    # Re-read the environment so values exported after import are picked up
    config.reload()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    # Load configuration from config module
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["ENV_NAME"] = config.FLASK_ENV
    app.config["SQLALCHEMY_DATABASE_URI"] = config.SQLALCHEMY_DATABASE_URI
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_SIZE
    app.json.sort_keys = False
    if not config.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        # Database connection pooling for server databases
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
        }

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = ["application/json"]
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(config.LOG_LEVEL)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    # Stateless bearer-token API: no session cookies to protect
    login_manager.session_protection = None
    compress.init_app(app)

    # Initialize security features
    from alfitra.security import init_security
    init_security(app, config.CORS_ORIGINS)

    # Bearer tokens are resolved per request; there is no server-side session
    @login_manager.request_loader
    def load_user_from_request(req):
        from alfitra.auth.utils import load_user_from_authorization
        return load_user_from_authorization(req.headers.get("Authorization"))

    @app.route("/")
    def index():
        return jsonify({"success": True, "message": "Alfitra Quiz API running"}), 200

    from alfitra.common.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from alfitra.auth import auth_bp
    app.register_blueprint(auth_bp)

    from alfitra.modules import modules_bp
    app.register_blueprint(modules_bp)

    from alfitra.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    from alfitra.materials import materials_bp
    app.register_blueprint(materials_bp)

    from alfitra.admin import admin_bp
    app.register_blueprint(admin_bp)

    from alfitra.cli import register_commands
    register_commands(app)

    # Create tables if they do not exist
    with app.app_context():
        from alfitra.auth.models import User  # noqa: F401
        from alfitra.modules.models import Module, QuizDay  # noqa: F401
        from alfitra.quiz.models import Question, Submission, SubmissionAnswer  # noqa: F401
        from alfitra.materials.models import ReferenceMaterial  # noqa: F401
        db.create_all()

    return app
