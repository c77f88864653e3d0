"""Centralized configuration for CreditDesk.

This module contains the default values, business rule constants and display
formats used by the credit wizard, the amortization engine and the payment
plan document.
"""
import os

# =============================================================================
# CREDIT DEFAULTS
# =============================================================================

# Default monthly financing rate (1.96%)
DEFAULT_MONTHLY_RATE = 0.0196

# Default effective annual rate shown on the payment plan (23.52%)
DEFAULT_ANNUAL_RATE = 0.2352

# Term used by the payment plan when none was captured
DEFAULT_TERM_MONTHS = 1

# Term preselected on the product form
DEFAULT_FORM_TERM_MONTHS = 12

# Terms offered on the product form (in months)
TERM_OPTIONS = (6, 12, 24, 36)

# =============================================================================
# BUSINESS RULES
# =============================================================================

# Minimum term accepted by the amortization engine
MIN_TERM_MONTHS = 1

# Rate kinds as stored by the back office ("%" = percentage, "$" = raw value)
RATE_KIND_PERCENT = "%"
RATE_KIND_VALUE = "$"

# Financing rate setting (TASA_FIN) used by the product form: (value, kind)
FINANCING_RATE_SETTING = (1.96, RATE_KIND_PERCENT)

# Extended warranty by term (GAR_EXT_<months>), as a percentage of the product
# value. Applied only when the form has no warranty amount; terms missing here
# get no percentage-based warranty.
EXTENDED_WARRANTY_PERCENT_BY_TERM = {}

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Date format for display (es-CO)
DATE_FORMAT_DISPLAY = "%d/%m/%Y"

# Currency symbol and thousands separator (COP, no decimals)
CURRENCY_SYMBOL = "$"
THOUSANDS_SEPARATOR = "."

# Placeholder for missing client data
UNKNOWN_PLACEHOLDER = "—"

# Placeholder for a missing document code
MISSING_CODE_PLACEHOLDER = "-"

# =============================================================================
# PAYMENT PLAN DOCUMENT
# =============================================================================

DEFAULT_CITY = "Cali"
DEFAULT_PRODUCT_NAME = "Motocicleta"
NOT_DELIVERED_LABEL = "No entregado"
PLAN_TITLE = "PLAN DE PAGOS"
COMPANY_LINE = "VERIFICARTE AAA S.A.S.  •  NIT. 901155548-8"
DEFAULT_LOGO_PATH = "resources/logo.png"

# PDF margins in mm
PDF_MARGIN_MM = 10

# =============================================================================
# APPEARANCE
# =============================================================================

# Initial theme ("Light" or "Dark"), switchable from the Ver menu
DEFAULT_THEME = os.environ.get("CREDITDESK_THEME", "Light")

# =============================================================================
# LOGGING
# =============================================================================

LOG_DIR = os.environ.get("CREDITDESK_LOG_DIR", os.path.join(os.path.expanduser("~"), ".creditdesk", "logs"))
LOG_FILE = "creditdesk.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
