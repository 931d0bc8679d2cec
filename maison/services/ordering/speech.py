"""Speech transcript extraction.

Turns a free-form dictated order (French, with some Darija/Arabic script)
into an ExtractionPatch. Every field is extracted on its own: a field whose
rules all miss is simply left out of the patch.

Name and date extraction are ordered rule tables. Each rule has a name so it
can be exercised on its own; the first rule that produces a value wins.
"""
import logging
import re
from datetime import date
from typing import Callable, List, Optional, Tuple

from maison.services.catalog.repository import CatalogLookup
from maison.services.ordering.models import ExtractionPatch, OrderItem, SpeechOutcome
from maison.services.ordering.text import ascii_digits, fold

logger = logging.getLogger(__name__)

QUANTITY_WINDOW = 25

_LETTER = r"[^\W\d_]"
_WORD = rf"{_LETTER}+(?:-{_LETTER}+)*"
# Latin capitals, or Arabic letters (no case)
_CAP_WORD = rf"(?:[A-ZÀ-ÖØ-Þ]|[\u0621-\u064A]){_LETTER}*(?:-{_LETTER}+)*"
_NAME_ANY = rf"({_WORD}(?:[ \t]+{_CAP_WORD})?)"
_NAME_CAP = rf"({_CAP_WORD}(?:[ \t]+{_CAP_WORD})?)"

NAME_RULES: List[Tuple[str, re.Pattern[str]]] = [
    ("mon_nom_est", re.compile(rf"(?i:\bmon\s+nom\s+(?:est|c['’]est))\s+{_NAME_ANY}")),
    ("je_m_appelle", re.compile(rf"(?i:\bje\s+m['’]\s?appelle)\s+{_NAME_ANY}")),
    ("client_ou_pour", re.compile(rf"(?i:\b(?:client|pour))\s+{_NAME_CAP}")),
    ("nom_deux_points", re.compile(rf"(?i:\b(?:nom|client))\s*:\s*{_NAME_ANY}")),
]

PHONE_PATTERN = re.compile(
    r"(?<![\d+])"
    r"(?:(?:\+|00)?\d{2,3}[\s.-]?)?"  # country prefix
    r"0?\d"
    r"(?:[\s.-]?\d{2}){4}"
    r"(?!\d)"
)

QUANTITY_PATTERN = re.compile(r"(?<!\d)(\d{1,3})(?!\d)")

FRENCH_MONTHS = {
    "janvier": 1,
    "fevrier": 2,
    "mars": 3,
    "avril": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "aout": 8,
    "septembre": 9,
    "octobre": 10,
    "novembre": 11,
    "decembre": 12,
}

# Matched against fold()-ed text, so accents are already gone
_DATE_TRIGGER = r"\b(?:livraison|pour\s+le|date)\s*:?\s*(?:(?:est|du|le|pour)\s+)*"
_MONTH_ALTERNATION = "|".join(FRENCH_MONTHS)

NUMERIC_DATE_PATTERN = re.compile(
    _DATE_TRIGGER + r"(\d{1,2})\s*[/.-]\s*(\d{1,2})\s*[/.-]\s*(\d{4}|\d{2})(?!\d)"
)
MONTH_NAME_DATE_PATTERN = re.compile(
    _DATE_TRIGGER + rf"(\d{{1,2}})(?:er)?\s+({_MONTH_ALTERNATION})\b"
)


def _numeric_date(match: re.Match[str], today: Callable[[], date]) -> Optional[date]:
    day, month, year = (int(group) for group in match.groups())
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _month_name_date(match: re.Match[str], today: Callable[[], date]) -> Optional[date]:
    day = int(match.group(1))
    month = FRENCH_MONTHS[match.group(2)]
    try:
        return date(today().year, month, day)
    except ValueError:
        return None


DATE_RULES: List[Tuple[str, re.Pattern[str], Callable[[re.Match[str], Callable[[], date]], Optional[date]]]] = [
    ("numeric", NUMERIC_DATE_PATTERN, _numeric_date),
    ("month_name", MONTH_NAME_DATE_PATTERN, _month_name_date),
]


def extract_customer_name(text: str) -> Optional[str]:
    """Return the customer name from the first name rule that matches."""
    for rule_name, pattern in NAME_RULES:
        match = pattern.search(text)
        if match:
            logger.debug(f"[SPEECH] Name rule '{rule_name}' matched")
            return match.group(1).strip()
    return None


def extract_phone_number(text: str) -> Optional[str]:
    """Return the first phone number in the text, digits only."""
    match = PHONE_PATTERN.search(ascii_digits(text))
    if not match:
        return None
    return re.sub(r"\D", "", match.group(0))


def extract_delivery_date(text: str, today: Callable[[], date] = date.today) -> Optional[date]:
    """Return the delivery date from the first date rule that yields a real date."""
    folded = fold(text)
    for rule_name, pattern, build in DATE_RULES:
        for match in pattern.finditer(folded):
            delivery_date = build(match, today)
            if delivery_date is not None:
                logger.debug(f"[SPEECH] Date rule '{rule_name}' matched: {delivery_date.isoformat()}")
                return delivery_date
    return None


def extract_items(
    text: str, lookup: CatalogLookup, quantity_window: int = QUANTITY_WINDOW
) -> List[OrderItem]:
    """Build one line per catalog product named in the text, in catalog order.

    The quantity is the closest 1-3 digit number in the `quantity_window`
    characters before the product name, defaulting to 1.
    """
    text = ascii_digits(text)
    items = []
    for product, index in lookup.find_in_text(text):
        window = text[max(0, index - quantity_window):index]
        numbers = QUANTITY_PATTERN.findall(window)
        quantity = max(1, int(numbers[-1])) if numbers else 1
        items.append(
            OrderItem(
                product=product.name,
                quantity=quantity,
                unit_price=product.price,
                total=quantity * product.price,
            )
        )
    return items


class SpeechExtractor:
    """Extracts an order patch from a dictated transcript."""

    def __init__(
        self,
        lookup: CatalogLookup,
        today: Callable[[], date] = date.today,
        quantity_window: int = QUANTITY_WINDOW,
    ):
        self.lookup = lookup
        self.today = today
        self.quantity_window = quantity_window

    def extract(self, transcript: Optional[str]) -> ExtractionPatch:
        """
        Extract a patch from a transcript.

        Args:
            transcript: Transcribed speech, any casing

        Returns:
            ExtractionPatch addressing only the fields that were found
        """
        text = transcript or ""
        found = {}

        customer_name = extract_customer_name(text)
        if customer_name:
            found["customer_name"] = customer_name

        phone_number = extract_phone_number(text)
        if phone_number:
            found["phone_number"] = phone_number

        items = extract_items(text, self.lookup, self.quantity_window)
        if items:
            found["items"] = items

        delivery_date = extract_delivery_date(text, self.today)
        if delivery_date:
            found["delivery_date"] = delivery_date

        logger.info(
            f"[SPEECH] Extracted fields: {sorted(found) or 'none'} "
            f"({len(items)} items, catalog of {len(self.lookup)})"
        )
        return ExtractionPatch(**found)

    def extract_outcome(self, transcript: Optional[str]) -> SpeechOutcome:
        """Extract a patch and flag whether anything was found."""
        patch = self.extract(transcript)
        return SpeechOutcome(patch=patch, extracted=not patch.is_empty())
