from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
import logging
import os
from dotenv import load_dotenv

# ==========================================================
#  Initialize extensions
# ==========================================================
db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()
migrate = Migrate()


# ==========================================================
#  Application Factory
# ==========================================================
def create_app(test_config=None):
    app = Flask(__name__)

    # --------------------------
    # Load environment variables
    # --------------------------
    load_dotenv()

    # --------------------------
    # Basic Config
    # --------------------------
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "dev-secret-key")

    app.config['MYSQL_HOST'] = os.getenv("MYSQL_HOST", "127.0.0.1")
    app.config['MYSQL_USER'] = os.getenv("MYSQL_USER", "root")
    app.config['MYSQL_PASSWORD'] = os.getenv("MYSQL_PASSWORD", "")
    app.config['MYSQL_DB'] = os.getenv("MYSQL_DB", "exam_booking")

    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv("DATABASE_URL") or (
        f"mysql+pymysql://{app.config['MYSQL_USER']}:{app.config['MYSQL_PASSWORD']}"
        f"@{app.config['MYSQL_HOST']}/{app.config['MYSQL_DB']}?charset=utf8mb4"
    )
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Evidence uploads (ID cards, payment slips)
    app.config['UPLOAD_FOLDER'] = os.getenv(
        "UPLOAD_FOLDER", os.path.join(app.instance_path, "booking-files")
    )
    app.config['PUBLIC_FILES_URL'] = os.getenv("PUBLIC_FILES_URL", "/files")
    app.config['MAX_CONTENT_LENGTH'] = int(os.getenv("MAX_CONTENT_LENGTH", 10 * 1024 * 1024))

    app.config['LOG_LEVEL'] = os.getenv("LOG_LEVEL", "INFO")

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # --------------------------
    # Initialize extensions
    # --------------------------
    db.init_app(app)
    csrf.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from .storage import LocalFileStore

    app.extensions['file_store'] = LocalFileStore(
        app.config['UPLOAD_FOLDER'], app.config['PUBLIC_FILES_URL']
    )

    # --------------------------
    # Login manager setup
    # --------------------------
    from .models import Staff, ExamRound, Booking  # Import here to avoid circular imports

    login_manager.login_view = "auth.login"
    login_manager.login_message_category = "info"
    login_manager.session_protection = "strong"

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(Staff, int(user_id))

    # --------------------------
    # Create database tables
    # --------------------------
    with app.app_context():
        db.create_all()

    # --------------------------
    # Register Blueprints
    # --------------------------
    from .booking_ui import booking_ui
    from .admin_ui import admin_ui
    from .auth import auth
    from .commands import register_commands

    app.register_blueprint(booking_ui)
    app.register_blueprint(auth)
    app.register_blueprint(admin_ui, url_prefix="/admin")
    app.logger.debug("Blueprints registered: %s", ", ".join(app.blueprints))

    register_commands(app)

    # --------------------------
    # CLI Context (optional)
    # --------------------------
    @app.shell_context_processor
    def make_shell_context():
        return {"db": db, "Staff": Staff, "ExamRound": ExamRound, "Booking": Booking}

    return app
