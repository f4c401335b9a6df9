from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .clients.controller import register as register_clients
from .container import Container, Policies, build_container
from .core.constants import DEFAULT_CGST_RATE, DEFAULT_SGST_RATE
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .deductions.controller import register as register_deductions
from .employees.controller import register as register_employees
from .invoices.controller import register as register_invoices
from .payroll.controller import register as register_payroll
from .requests.controller import register as register_requests
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "invalid_input": 400,
    "unauthenticated": 401,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "conflict_replay": 409,
}

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _policies_from(settings) -> Policies:
    return Policies(
        salary_approved_only=bool(getattr(settings, "SALARY_APPROVED_ONLY", False)),
        salary_period_deductions=bool(getattr(settings, "SALARY_PERIOD_DEDUCTIONS", False)),
        invoice_scope_by_client=bool(getattr(settings, "INVOICE_SCOPE_BY_CLIENT", True)),
        default_cgst_rate=Decimal(getattr(settings, "DEFAULT_CGST_RATE", DEFAULT_CGST_RATE)),
        default_sgst_rate=Decimal(getattr(settings, "DEFAULT_SGST_RATE", DEFAULT_SGST_RATE)),
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = STATUS_BY_KIND.get(e.kind, 400)
        if status >= 403:
            logger.info("%s %s: %s", status, e.kind, e)
        return jsonify({"error": {"kind": e.kind, "message": str(e)}}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        kind = "not_found" if e.code == 404 else "invalid_input"
        return jsonify({"error": {"kind": kind, "message": e.description or e.name}}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error: %s", e)
        return jsonify({"error": {"kind": "internal", "message": "Internal server error"}}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app. Pass ``container`` to skip MySQL wiring (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            ensure_admin_user(
                db_config,
                username=getattr(settings, "ADMIN_USERNAME", "admin"),
                password=getattr(settings, "ADMIN_PASSWORD", None),
            )
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, policies=_policies_from(settings))

    register_error_handlers(app)
    register_users(app, container)
    register_clients(app, container)
    register_employees(app, container)
    register_deductions(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    register_payroll(app, container)
    register_invoices(app, container)

    return app
