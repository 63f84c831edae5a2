"""Staff alert when a product sells out."""

import structlog
from protean.utils.mixins import handle

from marketplace.catalogue.events import ProductSoldOut
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.notifications import get_notifier

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Product)
class ProductStockAlertHandler:
    @handle(ProductSoldOut)
    def on_product_sold_out(self, event: ProductSoldOut) -> None:
        logger.info("Product sold out", product_id=str(event.product_id), name=event.name)
        get_notifier().product_sold_out(str(event.product_id), event.name)
