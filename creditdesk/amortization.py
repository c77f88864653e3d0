"""Amortization engine for CreditDesk.

Fixed-installment (French) schedules for dealership credits. Every monetary
quantity is rounded to the whole peso at the point it is computed, and the
last period absorbs whatever balance is left so the schedule always closes
at exactly zero.

Functions:
    - build_schedule: CreditInput -> AmortizationResult
    - calculate_installment: constant monthly payment for a financed amount
    - summarize_credit: product-step summary (fees, warranty, insurance)
"""
import math
import numbers

from creditdesk.config import (
    MIN_TERM_MONTHS, RATE_KIND_PERCENT, RATE_KIND_VALUE,
    FINANCING_RATE_SETTING, EXTENDED_WARRANTY_PERCENT_BY_TERM
)
from creditdesk.data_structures import (
    CreditInput, AmortizationRow, AmortizationResult, CreditCharges, CreditSummary
)
from creditdesk.exceptions import InvalidCreditInputError
from creditdesk.money import round_half_up


def _validate_input(credit: CreditInput) -> None:
    """Reject preconditions that have no defined fallback.

    Negative amounts are not rejected: they clamp to a zero financed amount.

    Raises:
        InvalidCreditInputError: On a non-integer or sub-minimum term, a
            negative rate, or a non-finite amount.
    """
    term = credit.term_months
    if isinstance(term, bool) or not isinstance(term, numbers.Integral):
        raise InvalidCreditInputError("term_months", term, "must be an integer")
    if term < MIN_TERM_MONTHS:
        raise InvalidCreditInputError("term_months", term, f"must be >= {MIN_TERM_MONTHS}")

    for name in ("product_value", "down_payment", "monthly_rate"):
        value = getattr(credit, name)
        if not isinstance(value, numbers.Real) or not math.isfinite(value):
            raise InvalidCreditInputError(name, value, "must be a finite real number (int/float)")

    if credit.monthly_rate < 0:
        raise InvalidCreditInputError("monthly_rate", credit.monthly_rate, "must be >= 0")


def financed_amount(product_value, down_payment):
    """Principal left after the down payment, never negative."""
    return max(0, product_value - down_payment)


def calculate_installment(financed, monthly_rate, term_months) -> int:
    """Constant monthly installment, rounded to the peso.

    With no interest the amount is split evenly over max(1, n) months.
    """
    if monthly_rate > 0:
        return round_half_up(
            (monthly_rate * financed) / (1 - math.pow(1 + monthly_rate, -term_months))
        )
    return round_half_up(financed / max(1, term_months))


def build_schedule(credit: CreditInput) -> AmortizationResult:
    """Compute the full amortization schedule for a credit.

    Args:
        credit: Terms of the simulation. Not mutated.

    Returns:
        AmortizationResult with one row per month of the term.

    Raises:
        InvalidCreditInputError: If the term or rate break their preconditions.
    """
    _validate_input(credit)

    financed = financed_amount(credit.product_value, credit.down_payment)
    rate = credit.monthly_rate
    term = int(credit.term_months)
    installment = calculate_installment(financed, rate, term)

    rows = []
    balance = financed
    for period in range(1, term + 1):
        interest = round_half_up(balance * rate)
        # Last period settles the remaining balance, rounding residue included
        principal_paid = balance if period == term else installment - interest
        closing_balance = max(0, balance - principal_paid)
        rows.append(AmortizationRow(
            period=period,
            opening_balance=balance,
            interest=interest,
            principal_paid=principal_paid,
            installment=installment,
            closing_balance=closing_balance
        ))
        balance = closing_balance

    return AmortizationResult(
        rows=tuple(rows),
        financed_amount=financed,
        installment=installment
    )


def rate_from_config(value, kind: str = RATE_KIND_PERCENT) -> float:
    """Convert a back-office rate setting into a monthly fraction.

    "%" settings hold a percentage (1.88 -> 0.0188); "$" settings are
    already a fraction.

    Raises:
        ValueError: For an unknown kind.
    """
    if kind == RATE_KIND_PERCENT:
        return float(value) / 100
    if kind == RATE_KIND_VALUE:
        return float(value)
    raise ValueError(f"Unknown rate kind: {kind!r}")


def configured_monthly_rate(setting=FINANCING_RATE_SETTING) -> float:
    """Monthly rate from a (value, kind) financing rate setting."""
    value, kind = setting
    return rate_from_config(value, kind)


def warranty_percent_for_term(term_months, table=None):
    """Extended warranty percentage configured for a term, or None."""
    if table is None:
        table = EXTENDED_WARRANTY_PERCENT_BY_TERM
    return table.get(term_months)


def summarize_credit(charges: CreditCharges, monthly_rate: float,
                     warranty_percent: float = None) -> CreditSummary:
    """Build the product-step summary shown next to the schedule.

    Args:
        charges: Product value, down payment, term and financed fees.
        monthly_rate: Monthly rate as a fraction.
        warranty_percent: Extended warranty as a percentage of the product
            value, used only when charges.extended_warranty is 0.

    Returns:
        CreditSummary whose schedule finances the fees together with the
        product; insurance is added on top of the base installment.
    """
    warranty = charges.extended_warranty
    if not warranty and warranty_percent:
        warranty = charges.product_value * warranty_percent / 100

    financed_base = (charges.product_value + charges.soat + charges.registration
                     + charges.taxes + charges.accessories + warranty)

    schedule = build_schedule(CreditInput(
        product_value=financed_base,
        down_payment=charges.down_payment,
        term_months=charges.term_months,
        monthly_rate=monthly_rate
    ))
    monthly_insurance = round_half_up(charges.insurance_total / charges.term_months)

    return CreditSummary(
        financed_base=financed_base,
        down_payment=charges.down_payment,
        financed_amount=schedule.financed_amount,
        monthly_rate=monthly_rate,
        monthly_insurance=monthly_insurance,
        base_installment=schedule.installment,
        total_installment=schedule.installment + monthly_insurance,
        schedule=schedule
    )
