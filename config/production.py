import os
from decimal import Decimal

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
# No default: set ADMIN_PASSWORD explicitly to bootstrap the first admin.
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

SALARY_APPROVED_ONLY = bool(int(os.getenv("SALARY_APPROVED_ONLY", "0")))
SALARY_PERIOD_DEDUCTIONS = bool(int(os.getenv("SALARY_PERIOD_DEDUCTIONS", "0")))
INVOICE_SCOPE_BY_CLIENT = bool(int(os.getenv("INVOICE_SCOPE_BY_CLIENT", "1")))
DEFAULT_CGST_RATE = Decimal(os.getenv("DEFAULT_CGST_RATE", "9"))
DEFAULT_SGST_RATE = Decimal(os.getenv("DEFAULT_SGST_RATE", "9"))
