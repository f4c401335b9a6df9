import os
from decimal import Decimal

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# First admin account, created only when no admin exists yet
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

# Payroll / billing policies
SALARY_APPROVED_ONLY = bool(int(os.getenv("SALARY_APPROVED_ONLY", "0")))
SALARY_PERIOD_DEDUCTIONS = bool(int(os.getenv("SALARY_PERIOD_DEDUCTIONS", "0")))
INVOICE_SCOPE_BY_CLIENT = bool(int(os.getenv("INVOICE_SCOPE_BY_CLIENT", "1")))
DEFAULT_CGST_RATE = Decimal(os.getenv("DEFAULT_CGST_RATE", "9"))
DEFAULT_SGST_RATE = Decimal(os.getenv("DEFAULT_SGST_RATE", "9"))
