"""
Shared validation predicates and normalization helpers.

Every method is pure given the settings object it was built with, so a
single instance can be shared by readers and processors of all entities.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Optional
import logging

from core.config import Settings
from models.base import AccountType, LedgerTransactionKind, TransactionType

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s\-.]+$")
HAS_LETTER_PATTERN = re.compile(r"[a-zA-ZÀ-ÿ]")
WHITESPACE_PATTERN = re.compile(r"\s+")

MAX_ID = 999_999_999

VALID_TRANSACTION_TYPES: FrozenSet[str] = frozenset(t.value for t in TransactionType)
VALID_ACCOUNT_TYPES: FrozenSet[str] = frozenset(t.value for t in AccountType)
VALID_LEDGER_KINDS: FrozenSet[str] = frozenset(t.value for t in LedgerTransactionKind)

# Values that are always rejected, even if a synonym table were to map them
INVALID_TRANSACTION_TYPES: FrozenSet[str] = frozenset({"INVALID", "DESCONOCIDO", "UNKNOWN", "ERROR"})
INVALID_ACCOUNT_TYPES: FrozenSet[str] = INVALID_TRANSACTION_TYPES | {"-1"}
INVALID_LEDGER_KINDS: FrozenSet[str] = INVALID_TRANSACTION_TYPES | {"-1", "NULL"}


def _synonyms(table: Dict[str, tuple]) -> Dict[str, str]:
    """Invert {canonical: (synonyms...)} into {synonym: canonical}"""
    mapping = {}
    for canonical, aliases in table.items():
        mapping[canonical] = canonical
        for alias in aliases:
            mapping[alias] = canonical
    return mapping


TRANSACTION_TYPE_SYNONYMS = _synonyms({
    "DEBITO": ("DEBIT", "DB", "RETIRO", "WITHDRAWAL", "EGRESO"),
    "CREDITO": ("CREDIT", "CR", "DEPOSITO", "DEPOSIT", "INGRESO"),
})

ACCOUNT_TYPE_SYNONYMS = _synonyms({
    "AHORRO": ("SAVINGS", "SAV", "CUENTA_AHORRO", "CUENTAAHORRO"),
    "PRESTAMO": (
        "LOAN", "PRESTAMO_PERSONAL", "PRESTAMOPERSONAL",
        "CREDITO_PERSONAL", "CREDITOPERSONAL",
    ),
    "HIPOTECA": ("MORTGAGE", "HIP", "CREDITO_HIPOTECARIO", "CREDITOHIPOTECARIO"),
    "CREDITO": ("CREDIT", "CORRIENTE", "CHECKING", "CURRENT", "CHK"),
})

# DEPOSITO and RETIRO are canonical ledger kinds, so they map to themselves
# here instead of collapsing into CREDITO/DEBITO.
LEDGER_KIND_SYNONYMS = _synonyms({
    "DEBITO": ("DEBIT", "DB", "WITHDRAWAL", "EGRESO"),
    "CREDITO": ("CREDIT", "CR", "DEPOSIT", "INGRESO"),
    "DEPOSITO": ("DEP",),
    "RETIRO": ("RET",),
    "TRANSFERENCIA": ("TRANSFER", "TRF", "TRANSF"),
    "INTERES": ("INTEREST", "INT", "INTERESES"),
    "COMISION": ("COMMISSION", "COM", "COMISIONES", "FEE"),
    "AJUSTE": ("ADJUSTMENT", "ADJ", "AJUSTES"),
    "CARGO": ("CHARGE", "CHG", "CARGOS"),
    "ABONO": ("CREDIT_NOTE", "ABN", "ABONOS"),
})


class ValidationUtils:
    """
    Field-level rules shared across entities.

    Handles:
    - Numeric string checks (integer/decimal)
    - Range checks driven by configuration (amounts, ages, dates, names)
    - Categorical normalization through fixed synonym tables
    - Text cleanup and capitalization
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    # ------------------------------------------------------------------
    # Numeric strings
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_number(value: Optional[str]) -> bool:
        if value is None or not value.strip():
            return False
        return NUMBER_PATTERN.match(value.strip()) is not None

    @staticmethod
    def is_valid_integer(value: Optional[str]) -> bool:
        if value is None or not value.strip():
            return False
        return INTEGER_PATTERN.match(value.strip()) is not None

    @staticmethod
    def is_valid_decimal(value: Optional[str]) -> bool:
        if value is None or not value.strip():
            return False
        if DECIMAL_PATTERN.match(value.strip()) is None:
            return False
        try:
            Decimal(value.strip())
            return True
        except InvalidOperation:
            logger.debug(f"'{value}' cannot be converted to Decimal")
            return False

    @staticmethod
    def parse_integer(value: str) -> int:
        """Strict integer parse; raises ValueError on anything but digits"""
        if not ValidationUtils.is_valid_integer(value):
            raise ValueError(f"Formato de entero inválido: '{value}'")
        return int(value.strip())

    @staticmethod
    def parse_decimal(value: str) -> Decimal:
        """Strict decimal parse; raises ValueError on anything but a plain number"""
        if not ValidationUtils.is_valid_decimal(value):
            raise ValueError(f"Formato de número inválido: '{value}'")
        return Decimal(value.strip())

    # ------------------------------------------------------------------
    # Presence and ranges
    # ------------------------------------------------------------------

    @staticmethod
    def is_not_empty(value: Optional[str]) -> bool:
        return value is not None and bool(value.strip())

    @staticmethod
    def are_required_fields_valid(*fields: Any) -> bool:
        for field in fields:
            if field is None:
                return False
            if isinstance(field, str) and not field.strip():
                return False
        return True

    @staticmethod
    def is_valid_id(value: Optional[int]) -> bool:
        return value is not None and 0 < value <= MAX_ID

    def is_valid_name_length(self, name: Optional[str]) -> bool:
        if name is None:
            return False
        length = len(name.strip())
        return self.settings.NAME_MIN_LENGTH <= length <= self.settings.NAME_MAX_LENGTH

    def is_valid_name(self, name: Optional[str]) -> bool:
        """Letters (accented included), spaces, hyphens and periods, at least one letter"""
        if name is None or not name.strip():
            return False

        clean_name = name.strip()
        if not self.is_valid_name_length(clean_name):
            return False

        return (
            NAME_PATTERN.match(clean_name) is not None
            and HAS_LETTER_PATTERN.search(clean_name) is not None
        )

    def is_valid_description(self, description: Optional[str]) -> bool:
        if description is None or not description.strip():
            return False
        length = len(description.strip())
        return self.settings.DESCRIPTION_MIN_LENGTH <= length <= self.settings.DESCRIPTION_MAX_LENGTH

    def is_valid_amount(self, amount: Optional[Decimal]) -> bool:
        if amount is None:
            return False
        return amount.copy_abs() <= self.settings.MAX_AMOUNT

    def is_valid_age(self, age: Optional[int]) -> bool:
        if age is None:
            return False
        return self.settings.MIN_AGE <= age <= self.settings.MAX_AGE

    def is_valid_date(self, value: Optional[date], today: Optional[date] = None) -> bool:
        """Configured minimum year, and no future dates when that check is enabled"""
        if value is None:
            return False

        if value < date(self.settings.MIN_YEAR, 1, 1):
            return False

        today = today or date.today()
        if self.settings.REJECT_FUTURE_DATES and value > today:
            return False

        return True

    # ------------------------------------------------------------------
    # Categorical normalization
    # ------------------------------------------------------------------

    def _normalize_category(
        self,
        value: Optional[str],
        synonyms: Dict[str, str],
        invalid: FrozenSet[str],
    ) -> Optional[str]:
        if value is None or not value.strip():
            return None

        clean_value = value.strip()
        if self.settings.NORMALIZE_CASE:
            clean_value = clean_value.upper()

        if clean_value in invalid:
            logger.debug(f"Category flagged as invalid: '{value}'")
            return clean_value

        if not self.settings.NORMALIZE_TYPES:
            return clean_value

        canonical = synonyms.get(clean_value)
        if canonical is None:
            # Unrecognized values pass through and are rejected downstream
            logger.debug(f"Unrecognized category: '{value}'")
            return clean_value

        return canonical

    def normalize_transaction_type(self, value: Optional[str]) -> Optional[str]:
        return self._normalize_category(value, TRANSACTION_TYPE_SYNONYMS, INVALID_TRANSACTION_TYPES)

    def normalize_account_type(self, value: Optional[str]) -> Optional[str]:
        return self._normalize_category(value, ACCOUNT_TYPE_SYNONYMS, INVALID_ACCOUNT_TYPES)

    def normalize_ledger_transaction_kind(self, value: Optional[str]) -> Optional[str]:
        return self._normalize_category(value, LEDGER_KIND_SYNONYMS, INVALID_LEDGER_KINDS)

    def is_valid_transaction_type(self, value: Optional[str]) -> bool:
        return self.normalize_transaction_type(value) in VALID_TRANSACTION_TYPES

    def is_valid_account_type(self, value: Optional[str]) -> bool:
        return self.normalize_account_type(value) in VALID_ACCOUNT_TYPES

    def is_valid_ledger_transaction_kind(self, value: Optional[str]) -> bool:
        return self.normalize_ledger_transaction_kind(value) in VALID_LEDGER_KINDS

    # ------------------------------------------------------------------
    # Text and amounts
    # ------------------------------------------------------------------

    def clean_string(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None

        cleaned = value.strip()
        if self.settings.NORMALIZE_WHITESPACE:
            cleaned = WHITESPACE_PATTERN.sub(" ", cleaned)
        return cleaned

    def capitalize_name(self, name: Optional[str]) -> Optional[str]:
        """Capitalize every word: 'ana  MARÍA' -> 'Ana María'"""
        if name is None or not name.strip():
            return name

        if not self.settings.CAPITALIZE_NAMES:
            return name.strip()

        words = name.strip().lower().split()
        return " ".join(word[0].upper() + word[1:] for word in words)

    def capitalize_first(self, text: Optional[str]) -> Optional[str]:
        """Sentence case: first letter upper, the rest lower"""
        if text is None or not text:
            return text

        if not self.settings.CAPITALIZE_NAMES:
            return text

        return text[0].upper() + text[1:].lower()

    def process_amount(self, amount: Optional[Decimal]) -> Optional[Decimal]:
        """Negative amounts become positive when configured"""
        if amount is None:
            return None

        if self.settings.CONVERT_NEGATIVES and amount < 0:
            logger.debug(f"Converting negative amount {amount} to positive")
            return amount.copy_abs()

        return amount
