from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, List, Optional, Tuple, Union

import pandas as pd

from creditdesk.config import (
    DATE_FORMAT_DISPLAY, PLAN_TITLE, COMPANY_LINE
)


# =============================================================================
# WIZARD
# =============================================================================

@dataclass(frozen=True)
class Step:
    """One stage of the credit application wizard.

    `icon` and `content` are render slots supplied by the host UI (for the
    Qt timeline: a QIcon/str and a zero-argument widget factory). The
    navigator never looks inside them.
    """
    id: str
    title: str
    icon: Any = None
    content: Optional[Callable[[], Any]] = None


@dataclass(frozen=True)
class WizardState:
    active_id: str
    active_index: int


# =============================================================================
# AMORTIZATION
# =============================================================================

@dataclass(frozen=True)
class CreditInput:
    """Terms of a single credit simulation."""
    product_value: float
    down_payment: float
    term_months: int
    monthly_rate: float


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    opening_balance: float
    interest: int
    principal_paid: float
    installment: int
    closing_balance: float


@dataclass(frozen=True)
class AmortizationResult:
    """Full schedule produced by the amortization engine."""
    rows: Tuple[AmortizationRow, ...]
    financed_amount: float
    installment: int

    @property
    def total_interest(self) -> float:
        return sum(row.interest for row in self.rows)

    @property
    def total_paid(self) -> float:
        return sum(row.interest + row.principal_paid for row in self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame, one row per period."""
        columns = ["period", "opening_balance", "interest", "principal_paid",
                   "installment", "closing_balance"]
        return pd.DataFrame(
            [[getattr(row, col) for col in columns] for row in self.rows],
            columns=columns
        )


@dataclass(frozen=True)
class CreditCharges:
    """Values captured by the product step of the wizard.

    Fees are financed together with the product; insurance is paid monthly
    on top of the base installment.
    """
    product_value: float
    down_payment: float = 0
    term_months: int = 12
    soat: float = 0
    registration: float = 0
    taxes: float = 0
    accessories: float = 0
    insurance_total: float = 0
    extended_warranty: float = 0


@dataclass(frozen=True)
class CreditSummary:
    financed_base: float
    down_payment: float
    financed_amount: float
    monthly_rate: float
    monthly_insurance: int
    base_installment: int
    total_installment: int
    schedule: AmortizationResult


# =============================================================================
# PAYMENT PLAN DOCUMENT
# =============================================================================

@dataclass
class ClientInfo:
    name: Optional[str] = None
    document: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class ProductInfo:
    name: Optional[str] = None
    value: Optional[float] = None


@dataclass
class CreditTerms:
    down_payment: Optional[float] = None
    term_months: Optional[int] = None
    monthly_rate: Optional[float] = None
    annual_rate: Optional[float] = None
    start_date: Optional[Union[str, date]] = None
    delivery_date: Optional[Union[str, date]] = None


@dataclass
class PlanDocumentInput:
    """DTO for holding all data required for payment plan generation."""
    client: ClientInfo = field(default_factory=ClientInfo)
    product: ProductInfo = field(default_factory=ProductInfo)
    credit: CreditTerms = field(default_factory=CreditTerms)
    code: Optional[Union[str, int]] = None
    city: Optional[str] = None
    logo_path: Optional[str] = None


@dataclass
class PlanRow:
    period: int
    due_date: str
    opening_balance: float
    interest: int
    principal_paid: float
    installment: int
    closing_balance: float


@dataclass
class PlanPresentation:
    code: str
    city: str
    document_date: str
    logo_path: Optional[str]
    client_name: str
    client_document: str
    client_address: str
    client_phone: str
    product_name: str
    product_value: float
    down_payment: float
    financed_amount: float
    term_months: int
    monthly_rate: float
    annual_rate: float
    installment: int
    delivery_date: str
    rows: List[PlanRow]
    total_interest: float
    total_paid: float


@dataclass
class PlanConfig:
    custom_title: str = PLAN_TITLE
    custom_footer: str = COMPANY_LINE
    date_format: str = DATE_FORMAT_DISPLAY
    show_due_dates: bool = True
    allow_html_fallback: bool = True
