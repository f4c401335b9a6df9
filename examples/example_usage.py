"""Example: drive the service layer directly (no Flask).

Generates the salary sheet for a month and prints it as CSV.
Usage: python -m examples.example_usage 3 2025
"""

import importlib
import sys

from config import get_settings_module

from src.workforce_admin.workforce_admin.container import build_container
from src.workforce_admin.workforce_admin.core.enums import Role


def main():
    month, year = (int(v) for v in sys.argv[1:3])
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    salaries = container.payroll_service.generate_salaries(month=month, year=year, actor_role=Role.ACCOUNTANT)
    employees = {e.employee_id: e for e in container.employee_service.list_employees(actor_role=Role.ACCOUNTANT)}
    print(container.document_renderer.render_salary_sheet(salaries, employees).decode("utf-8-sig"))


if __name__ == "__main__":
    main()
