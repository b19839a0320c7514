from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from logistics_core.exceptions import NotFound, ValidationError

QUANTITY_STEP = Decimal('0.01')
ZERO = Decimal('0')
# largest values the DecimalField columns hold
MAX_QUANTITY = Decimal('99999999.99')
MAX_METER_READING = Decimal('9999999999.99')


def to_quantity(value, label='quantity', max_value=MAX_QUANTITY) -> Decimal:
    """Parse a gallon amount into a Decimal with two places."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be numeric")
    try:
        quantity = Decimal(str(value))
        if not quantity.is_finite():
            raise ValidationError(f"{label} must be a finite number")
        quantity = quantity.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{label} must be numeric, got {value!r}")
    if abs(quantity) > max_value:
        raise ValidationError(f"{label} is out of range: {quantity}")
    return quantity


def get_or_not_found(queryset, pk, label):
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} {pk} not found")
