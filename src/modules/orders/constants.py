"""Order and checkout constants."""

from django.db import models


class PaymentMethod(models.TextChoices):
    CASH_ON_DELIVERY = "cod", "Cash on delivery"
    CARD = "card", "Card"


class CheckoutPhase(models.TextChoices):
    """Stages a checkout moves through; ``ABORTED`` is reachable from any
    non-terminal stage."""

    VALIDATING = "VALIDATING", "Validating"
    LOCKING = "LOCKING", "Locking"
    STOCK_CHECKING = "STOCK_CHECKING", "Stock checking"
    COMPUTING = "COMPUTING", "Computing"
    WRITING = "WRITING", "Writing"
    COMMITTED = "COMMITTED", "Committed"
    ABORTED = "ABORTED", "Aborted"


ORDER_NUMBER_PREFIX = "BK"
ORDER_NUMBER_MAX_RETRIES = 5

MIN_CARD_DIGITS = 12
