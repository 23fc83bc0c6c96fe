import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from jewellery.core.errors import ServiceError, NotFoundError, ValidationFailed
from jewellery.db.repository import GenericRepository
from jewellery.models.entities import Cart, Order, OrderItem, OrderStatus, Product
from jewellery.models.schemas import (
    ApiResponse, OrderItemResponseDto, OrderResponseDto, OrderStatusUpdateDto,
)
from jewellery.services.cart_service import CartService
from jewellery.services.email_service import EmailService
from jewellery.services.product_service import ProductService

logger = logging.getLogger(__name__)

ORDER_INCLUDES = ("order_items.product", "user")


def to_order_response(order: Order) -> OrderResponseDto:
    items = [
        OrderItemResponseDto(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product.name,
            quantity=item.quantity,
            unit_price=item.price,
            subtotal=item.price * item.quantity,
        )
        for item in order.order_items
    ]
    return OrderResponseDto(
        id=order.id,
        user_id=order.user_id,
        order_date=order.order_date,
        status=order.status,
        total_amount=order.total_amount,
        items=items,
        user_name=order.user.first_name if order.user else "Unknown",
    )


class OrderService:
    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.orders = GenericRepository(Order, db)
        self.order_items = GenericRepository(OrderItem, db)
        self.products = GenericRepository(Product, db)
        self.carts = GenericRepository(Cart, db)
        self.cart_service = CartService(db)
        self.product_service = ProductService(db)
        self.email_service = email_service or EmailService()

    def _get_order_with_items(self, order_id: int) -> Optional[Order]:
        orders = self.orders.get_all_with_includes(Order.id == order_id, includes=ORDER_INCLUDES)
        return orders[0] if orders else None

    def create_order_from_cart(self, user_id: int) -> ApiResponse[OrderResponseDto]:
        """Turn the user's cart into a Pending order.

        Stock checks, stock decrements, the order rows and the cart clear run in a
        single transaction. Any failure rolls all of it back.
        """
        try:
            carts = self.carts.get_all_with_includes(Cart.user_id == user_id, includes=("items",))
            cart_items = list(carts[0].items) if carts else []
            if not cart_items:
                raise ValidationFailed("Cart is empty")

            total_amount = Decimal("0")
            order_items = []
            for cart_item in cart_items:
                product = self.products.get_by_id(cart_item.product_id, for_update=True)
                if product is None:
                    raise NotFoundError(f"Product not found: {cart_item.product_id}")

                if product.stock < cart_item.quantity:
                    raise ValidationFailed(
                        f"Insufficient stock for product: {product.name}",
                        [f"Only {product.stock} items available"],
                    )

                total_amount += product.price * cart_item.quantity
                order_items.append(
                    OrderItem(product_id=product.id, quantity=cart_item.quantity, price=product.price)
                )

                stock_update = self.product_service.update_stock(product.id, -cart_item.quantity, commit=False)
                if not stock_update.success:
                    raise ServiceError(stock_update.message, stock_update.errors)

            order = Order(
                user_id=user_id,
                order_date=datetime.now(timezone.utc),
                status=OrderStatus.PENDING,
                total_amount=total_amount,
            )
            order = self.orders.add(order, commit=False)
            for item in order_items:
                item.order_id = order.id
            self.order_items.add_all(order_items, commit=False)

            cleared = self.cart_service.clear_cart(user_id, commit=False)
            if not cleared.success:
                raise ServiceError(cleared.message, cleared.errors)

            self.db.commit()
            logger.info(f"Created order {order.id} for user {user_id}, total {total_amount}")
        except ServiceError as e:
            self.db.rollback()
            logger.info(f"Order for user {user_id} rejected: {e.message}")
            return ApiResponse[OrderResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error creating order for user {user_id}")
            return ApiResponse[OrderResponseDto].error_response("Error creating order", [str(e)])

        try:
            complete_order = self._get_order_with_items(order.id)
            response = to_order_response(complete_order)
        except Exception as e:
            logger.exception(f"Error reading back order {order.id}")
            return ApiResponse[OrderResponseDto].error_response("Error creating order", [str(e)])

        if complete_order.user is not None:
            self.email_service.send_order_confirmation(
                complete_order.user.email, complete_order.user.first_name, complete_order.id, complete_order.status
            )
        return ApiResponse[OrderResponseDto].success_response(response, "Order created successfully")

    def get_order_by_id(self, order_id: int, user_id: Optional[int] = None) -> ApiResponse[OrderResponseDto]:
        """Fetch one order. With ``user_id`` set, orders owned by someone else read as missing."""
        try:
            order = self._get_order_with_items(order_id)
            if order is None or (user_id is not None and order.user_id != user_id):
                return ApiResponse[OrderResponseDto].error_response("Order not found")
            return ApiResponse[OrderResponseDto].success_response(to_order_response(order))
        except Exception as e:
            logger.exception(f"Error retrieving order {order_id}")
            return ApiResponse[OrderResponseDto].error_response("Error retrieving order", [str(e)])

    def get_user_orders(self, user_id: int) -> ApiResponse[List[OrderResponseDto]]:
        try:
            orders = self.orders.get_all_with_includes(Order.user_id == user_id, includes=ORDER_INCLUDES)
            return ApiResponse[List[OrderResponseDto]].success_response([to_order_response(o) for o in orders])
        except Exception as e:
            logger.exception(f"Error retrieving orders for user {user_id}")
            return ApiResponse[List[OrderResponseDto]].error_response("Error retrieving orders", [str(e)])

    def get_all_orders(self) -> ApiResponse[List[OrderResponseDto]]:
        try:
            orders = self.orders.get_all_with_includes(includes=ORDER_INCLUDES)
            return ApiResponse[List[OrderResponseDto]].success_response([to_order_response(o) for o in orders])
        except Exception as e:
            logger.exception("Error retrieving orders")
            return ApiResponse[List[OrderResponseDto]].error_response("Error retrieving orders", [str(e)])

    def update_order_status(self, order_id: int, status_dto: OrderStatusUpdateDto) -> ApiResponse[OrderResponseDto]:
        try:
            new_status = status_dto.status
            if new_status not in OrderStatus.VALID_STATUSES:
                raise ValidationFailed(
                    "Invalid order status",
                    [f"Valid statuses are: {', '.join(OrderStatus.VALID_STATUSES)}"],
                )

            order = self._get_order_with_items(order_id)
            if order is None:
                raise NotFoundError("Order not found")

            changed = order.status != new_status
            order.status = new_status
            self.orders.update(order)
            logger.info(f"Order {order_id} status set to {new_status}")

            response = to_order_response(order)
        except ServiceError as e:
            self.db.rollback()
            return ApiResponse[OrderResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error updating status of order {order_id}")
            return ApiResponse[OrderResponseDto].error_response("Error updating order status", [str(e)])

        if changed and order.user is not None:
            self.email_service.send_order_status_update(order.user.email, order.user.first_name, order.id, new_status)
        return ApiResponse[OrderResponseDto].success_response(response, "Order status updated successfully")
