"""
Dispatch numbers: ``PE-000042-2026``.

Numbers are gapless and strictly increasing within a year. The counter is
bumped with a single atomic UPDATE; the first number of a year inserts the
row, and two callers racing on that insert are resolved by retrying.
"""
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, IntegrityError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from dispatches.models import DispatchSequence
from logistics_core.exceptions import ResourceContention, StoreFailure

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 6
DISPATCH_NUMBER_RE = re.compile(r'^(?P<prefix>[A-Z]+)-(?P<sequence>\d{6,})-(?P<year>\d{4})$')


def _prefix():
    return getattr(settings, 'DISPATCH_NUMBER_PREFIX', 'PE')


def format_dispatch_number(sequence: int, year: int, prefix: Optional[str] = None) -> str:
    return f"{prefix or _prefix()}-{sequence:0{SEQUENCE_WIDTH}d}-{year}"


@dataclass(frozen=True, order=True)
class DispatchNumber:
    """An issued number; orders by year, then sequence."""
    year: int
    sequence: int
    prefix: str = field(default='PE', compare=False)

    def __str__(self):
        return format_dispatch_number(self.sequence, self.year, self.prefix)

    def as_dict(self):
        return {'number': str(self), 'year': self.year, 'sequence': self.sequence}


def _current_year():
    return timezone.localdate().year


def _increment_sequence(year: int) -> int:
    with transaction.atomic():
        updated = DispatchSequence.objects.filter(year=year).update(
            last_number=F('last_number') + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            # First number of the year; a concurrent insert raises IntegrityError
            DispatchSequence.objects.create(year=year, last_number=1)
            return 1
        return DispatchSequence.objects.values_list('last_number', flat=True).get(year=year)


def next_dispatch_number(year: Optional[int] = None) -> DispatchNumber:
    """Reserve the next dispatch number of ``year`` (default: the current year)."""
    year = year or _current_year()
    max_attempts = max(1, settings.DISPATCH_NUMBER_MAX_ATTEMPTS)
    delay = settings.DISPATCH_NUMBER_RETRY_DELAY_SECONDS

    for attempt in range(1, max_attempts + 1):
        try:
            sequence = _increment_sequence(year)
        except (IntegrityError, OperationalError) as exc:
            logger.warning(f"Dispatch counter for {year} busy (attempt {attempt}/{max_attempts}): {exc}")
            if attempt < max_attempts and delay:
                time.sleep(delay * attempt)
            continue
        except DatabaseError as exc:
            logger.error(f"Dispatch counter for {year} failed: {exc}")
            raise StoreFailure(f"Could not generate a dispatch number for {year}") from exc

        number = DispatchNumber(year=year, sequence=sequence, prefix=_prefix())
        logger.info(f"Issued dispatch number {number}")
        return number

    logger.error(f"Gave up on dispatch counter for {year} after {max_attempts} attempts")
    raise ResourceContention(f"Dispatch counter for {year} is busy, try again")


def _last_number(year: int) -> int:
    last = DispatchSequence.objects.filter(year=year).values_list('last_number', flat=True).first()
    return last or 0


def peek_next_dispatch_number(year: Optional[int] = None) -> DispatchNumber:
    """The number the next reservation would get. Nothing is reserved."""
    year = year or _current_year()
    return DispatchNumber(year=year, sequence=_last_number(year) + 1, prefix=_prefix())


def parse_dispatch_number(text) -> Optional[DispatchNumber]:
    match = DISPATCH_NUMBER_RE.match(text.strip()) if isinstance(text, str) else None
    if not match or match.group('prefix') != _prefix():
        return None
    sequence = int(match.group('sequence'))
    if sequence < 1:
        return None
    return DispatchNumber(year=int(match.group('year')), sequence=sequence, prefix=match.group('prefix'))


def is_valid_dispatch_number(text) -> bool:
    return parse_dispatch_number(text) is not None


def dispatch_stats(year: Optional[int] = None, today=None) -> dict:
    today = today or timezone.localdate()
    year = year or today.year
    total = _last_number(year)

    if year == today.year:
        months_elapsed = today.month
    elif year < today.year:
        months_elapsed = 12
    else:
        months_elapsed = 0

    return {
        'year': year,
        'total_dispatches': total,
        'last_dispatch_number': format_dispatch_number(total, year) if total else None,
        'average_per_month': round(total / months_elapsed, 2) if months_elapsed else 0,
    }
