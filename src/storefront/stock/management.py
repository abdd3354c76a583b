"""Stock management — commands and handler used by the catalogue back office."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.stock.stock import StockItem


@storefront.command(part_of="StockItem")
class StockProduct:
    """Register a product's sellable stock and price, or overwrite them."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    on_hand = Integer(required=True, min_value=0)
    image = String(max_length=1000)


@storefront.command(part_of="StockItem")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=StockItem)
class StockManagementHandler:
    @handle(StockProduct)
    def stock_product(self, command):
        repo = current_domain.repository_for(StockItem)
        try:
            item = repo.get(command.product_id)
        except ObjectNotFoundError:
            item = StockItem.stock(
                product_id=command.product_id,
                name=command.name,
                unit_price=command.unit_price,
                on_hand=command.on_hand,
                image=command.image,
            )
        else:
            item.name = command.name
            item.image = command.image
            item.reprice(command.unit_price)
            item.on_hand = command.on_hand

        repo.add(item)
        return str(item.product_id)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(StockItem)
        item = repo.get(command.product_id)
        item.put_back(command.quantity)
        repo.add(item)
