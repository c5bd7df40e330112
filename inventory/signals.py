import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Stock, StockMovement

logger = logging.getLogger(__name__)


@receiver(post_save, sender=StockMovement)
def warn_on_low_stock(sender, instance, created, **kwargs):
    if not created:
        return

    min_threshold = Stock.objects.filter(product_id=instance.product_id).values_list(
        'min_threshold', flat=True
    ).first()
    if min_threshold is not None and instance.quantity_after <= min_threshold:
        logger.warning(
            f"Low stock: product_id={instance.product_id} quantity={instance.quantity_after} "
            f"min_threshold={min_threshold} after {instance.movement_type}"
        )
