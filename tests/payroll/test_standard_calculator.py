from decimal import Decimal

from src.workforce_admin.workforce_admin.payroll.calculator.standard_calculator import StandardSalaryCalculator, to_money


def test_standard_calculator_divides_monthly_rate_by_thirty():
    calc = StandardSalaryCalculator()
    figures = calc.compute(rate_per_month=Decimal("3000"), total_sessions=4, deductions=Decimal("0"))

    assert figures.rate_per_day == Decimal("100")
    assert figures.basic_amount == Decimal("400.00")
    assert figures.net_pay == Decimal("400.00")


def test_standard_calculator_rounds_basic_once():
    calc = StandardSalaryCalculator()
    figures = calc.compute(rate_per_month=Decimal("1000"), total_sessions=3, deductions=Decimal("0"))

    assert figures.basic_amount == Decimal("100.00")


def test_net_pay_may_go_negative():
    calc = StandardSalaryCalculator()
    figures = calc.compute(rate_per_month=Decimal("3000"), total_sessions=1, deductions=Decimal("250.5"))

    assert figures.deductions == Decimal("250.50")
    assert figures.net_pay == Decimal("-150.50")


def test_to_money_rounds_half_up():
    assert to_money(Decimal("0.005")) == Decimal("0.01")
    assert to_money(Decimal("2.344")) == Decimal("2.34")
