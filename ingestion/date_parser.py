"""
Multi-format date parsing and range validation
"""

from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MIN_VALID_DATE = date(2000, 1, 1)
MAX_DAYS_AHEAD = 30

# (strptime pattern, two-digit year) in priority order.
# strptime accepts unpadded day/month, so "2024-1-5" matches "%Y-%m-%d".
DATE_FORMATS: List[Tuple[str, bool]] = [
    ("%Y-%m-%d", False),  # 2024-01-05
    ("%d-%m-%Y", False),  # 05-01-2024
    ("%m-%d-%Y", False),  # 01-05-2024
    ("%d/%m/%Y", False),  # 05/01/2024
    ("%m/%d/%Y", False),  # 01/05/2024
    ("%Y/%m/%d", False),  # 2024/01/05
    ("%d-%m-%y", True),   # 05-01-24
    ("%m-%d-%y", True),   # 01-05-24
    ("%d/%m/%y", True),   # 05/01/24
    ("%m/%d/%y", True),   # 01/05/24
]


class DateParser:
    """
    Parse dates written in any of the supported layouts.

    Handles:
    - ISO, day-first and month-first orders
    - `/` and `-` separators
    - 2 and 4 digit years (00-29 -> 2000s, 30-99 -> 1900s)
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self._today = today or date.today

    def parse(self, text: Optional[str]) -> Optional[date]:
        """
        Parse `text` with the first matching format.

        Returns:
            The parsed date, or None when the text is empty or no format matches
        """
        if text is None or not text.strip():
            logger.debug("Empty date string")
            return None

        clean_text = text.strip()

        for pattern, two_digit_year in DATE_FORMATS:
            try:
                parsed = datetime.strptime(clean_text, pattern).date()
            except ValueError:
                continue

            if two_digit_year:
                parsed = parsed.replace(year=self.expand_year(parsed.year % 100))

            logger.debug(f"Parsed date '{clean_text}' -> {parsed}")
            return parsed

        logger.warning(f"Could not parse date: '{clean_text}'")
        return None

    @staticmethod
    def expand_year(two_digit_year: int) -> int:
        """Map a 2-digit year onto 1930-2029"""
        if two_digit_year < 30:
            return 2000 + two_digit_year
        return 1900 + two_digit_year

    def is_valid(self, value: Optional[date]) -> bool:
        """Sanity gate: not before 2000-01-01, at most 30 days in the future"""
        if value is None:
            return False

        max_date = self._today() + timedelta(days=MAX_DAYS_AHEAD)
        valid = MIN_VALID_DATE <= value <= max_date

        if not valid:
            logger.debug(f"Date out of range: {value} (range: {MIN_VALID_DATE} to {max_date})")

        return valid

    def today(self) -> date:
        return self._today()

    @staticmethod
    def normalize(value: Optional[date]) -> Optional[str]:
        """Format a date as yyyy-MM-dd"""
        if value is None:
            return None
        return value.isoformat()
