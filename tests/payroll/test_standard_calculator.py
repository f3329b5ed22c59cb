from decimal import Decimal

from src.hr_workflow.hr_workflow.payroll.calculator.standard_calculator import StandardNetPayCalculator


def test_standard_calculator_adds_bonus_and_subtracts_deductions():
    calc = StandardNetPayCalculator()

    net = calc.net_pay(salary=Decimal("5000.00"), bonus=Decimal("500.00"), deductions=Decimal("750.00"))

    assert net == Decimal("4750.00")


def test_standard_calculator_keeps_two_places():
    calc = StandardNetPayCalculator()

    net = calc.net_pay(salary=Decimal("1000.005"), bonus=Decimal("0"), deductions=Decimal("0"))

    assert net == Decimal("1000.01")
    assert net.as_tuple().exponent == -2


def test_deductions_larger_than_gross_go_negative():
    calc = StandardNetPayCalculator()

    assert calc.net_pay(salary=Decimal("100"), bonus=Decimal("0"), deductions=Decimal("150")) == Decimal("-50.00")
