import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from jewellery.core.errors import ServiceError, NotFoundError, ValidationFailed
from jewellery.db.repository import GenericRepository
from jewellery.models.entities import Cart, CartItem, Product
from jewellery.models.schemas import ApiResponse, CartItemResponseDto, CartResponseDto

logger = logging.getLogger(__name__)


def to_cart_response(user_id: int, cart: Optional[Cart]) -> CartResponseDto:
    if cart is None:
        return CartResponseDto(user_id=user_id)
    items = [
        CartItemResponseDto(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product.name,
            image_url=item.product.image_url,
            price=item.price,
            quantity=item.quantity,
            subtotal=item.price * item.quantity,
        )
        for item in cart.items
    ]
    return CartResponseDto(
        id=cart.id,
        user_id=user_id,
        items=items,
        total_items=sum(i.quantity for i in items),
        total_amount=sum((i.subtotal for i in items), Decimal("0")),
    )


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.carts = GenericRepository(Cart, db)
        self.cart_items = GenericRepository(CartItem, db)
        self.products = GenericRepository(Product, db)

    def _load_cart(self, user_id: int) -> Optional[Cart]:
        carts = self.carts.get_all_with_includes(Cart.user_id == user_id, includes=("items.product",))
        return carts[0] if carts else None

    def _get_or_create_cart(self, user_id: int) -> Cart:
        cart = self.carts.first(Cart.user_id == user_id)
        if cart is None:
            cart = self.carts.add(Cart(user_id=user_id), commit=False)
        return cart

    def _owned_item(self, user_id: int, item_id: int) -> CartItem:
        item = self.cart_items.get_by_id(item_id)
        if item is None or item.cart.user_id != user_id:
            raise NotFoundError("Cart item not found")
        return item

    def _check_stock(self, product: Product, quantity: int):
        if quantity > product.stock:
            raise ValidationFailed(
                f"Insufficient stock for product: {product.name}",
                [f"Only {product.stock} items available"],
            )

    def get_cart_by_user_id(self, user_id: int) -> ApiResponse[CartResponseDto]:
        try:
            return ApiResponse[CartResponseDto].success_response(to_cart_response(user_id, self._load_cart(user_id)))
        except Exception as e:
            logger.exception(f"Error retrieving cart for user {user_id}")
            return ApiResponse[CartResponseDto].error_response("Error retrieving cart", [str(e)])

    def add_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> ApiResponse[CartResponseDto]:
        try:
            if quantity <= 0:
                raise ValidationFailed("Quantity must be greater than zero")
            product = self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product not found")

            cart = self._get_or_create_cart(user_id)
            item = next((i for i in cart.items if i.product_id == product_id), None)
            new_quantity = quantity + (item.quantity if item else 0)
            self._check_stock(product, new_quantity)

            if item is None:
                cart.items.append(CartItem(product=product, quantity=new_quantity, price=product.price))
            else:
                item.quantity = new_quantity
                item.price = product.price
            self.db.commit()
            logger.info(f"User {user_id} added {quantity} x product {product_id} to cart")
            return self.get_cart_by_user_id(user_id)
        except ServiceError as e:
            self.db.rollback()
            return ApiResponse[CartResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error adding product {product_id} to cart")
            return ApiResponse[CartResponseDto].error_response("Error adding item to cart", [str(e)])

    def update_cart_item(self, user_id: int, item_id: int, quantity: int) -> ApiResponse[CartResponseDto]:
        try:
            if quantity <= 0:
                raise ValidationFailed("Quantity must be greater than zero")
            item = self._owned_item(user_id, item_id)
            self._check_stock(item.product, quantity)
            item.quantity = quantity
            item.price = item.product.price
            self.cart_items.update(item)
            return self.get_cart_by_user_id(user_id)
        except ServiceError as e:
            self.db.rollback()
            return ApiResponse[CartResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error updating cart item {item_id}")
            return ApiResponse[CartResponseDto].error_response("Error updating cart item", [str(e)])

    def remove_cart_item(self, user_id: int, item_id: int) -> ApiResponse[CartResponseDto]:
        try:
            item = self._owned_item(user_id, item_id)
            cart = item.cart
            cart.items.remove(item)
            self.db.commit()
            return self.get_cart_by_user_id(user_id)
        except ServiceError as e:
            return ApiResponse[CartResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error removing cart item {item_id}")
            return ApiResponse[CartResponseDto].error_response("Error removing cart item", [str(e)])

    def clear_cart(self, user_id: int, commit: bool = True) -> ApiResponse[bool]:
        try:
            cart = self.carts.first(Cart.user_id == user_id)
            if cart is not None:
                cart.items.clear()
                if commit:
                    self.db.commit()
                else:
                    self.db.flush()
            return ApiResponse[bool].success_response(True, "Cart cleared successfully")
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error clearing cart for user {user_id}")
            return ApiResponse[bool].error_response("Error clearing cart", [str(e)])
