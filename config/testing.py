import os
from decimal import Decimal

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = None

SALARY_APPROVED_ONLY = False
SALARY_PERIOD_DEDUCTIONS = False
INVOICE_SCOPE_BY_CLIENT = True
DEFAULT_CGST_RATE = Decimal("9")
DEFAULT_SGST_RATE = Decimal("9")
