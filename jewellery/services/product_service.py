import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from jewellery.core.errors import ServiceError, NotFoundError, ConflictError
from jewellery.db.repository import GenericRepository
from jewellery.models.entities import CartItem, Category, OrderItem, Product
from jewellery.models.schemas import (
    ApiResponse, ProductCreateDto, ProductResponseDto, ProductUpdateDto,
)

logger = logging.getLogger(__name__)

# product columns an update may set back to null
CLEARABLE_FIELDS = ("description", "image_url")


def to_product_response(product: Product) -> ProductResponseDto:
    return ProductResponseDto(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        stock=product.stock,
        image_url=product.image_url,
        category_id=product.category_id,
        category_name=product.category.name if product.category else "",
    )


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.products = GenericRepository(Product, db)
        self.categories = GenericRepository(Category, db)

    def get_all_products(self, category_id: Optional[int] = None,
                         search: Optional[str] = None) -> ApiResponse[List[ProductResponseDto]]:
        try:
            criteria = []
            if category_id is not None:
                criteria.append(Product.category_id == category_id)
            if search:
                pattern = f"%{search.strip()}%"
                criteria.append(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
            products = self.products.get_all_with_includes(*criteria, includes=("category",))
            return ApiResponse[List[ProductResponseDto]].success_response(
                [to_product_response(p) for p in products]
            )
        except Exception as e:
            logger.exception("Error retrieving products")
            return ApiResponse[List[ProductResponseDto]].error_response("Error retrieving products", [str(e)])

    def get_product_by_id(self, product_id: int) -> ApiResponse[ProductResponseDto]:
        try:
            product = self.products.get_by_id(product_id)
            if product is None:
                return ApiResponse[ProductResponseDto].error_response("Product not found")
            return ApiResponse[ProductResponseDto].success_response(to_product_response(product))
        except Exception as e:
            logger.exception(f"Error retrieving product {product_id}")
            return ApiResponse[ProductResponseDto].error_response("Error retrieving product", [str(e)])

    def create_product(self, dto: ProductCreateDto) -> ApiResponse[ProductResponseDto]:
        try:
            self._require_category(dto.category_id)
            product = self.products.add(Product(**dto.model_dump()))
            logger.info(f"Created product {product.id} '{product.name}'")
            return ApiResponse[ProductResponseDto].success_response(
                to_product_response(product), "Product created successfully"
            )
        except ServiceError as e:
            return ApiResponse[ProductResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception("Error creating product")
            return ApiResponse[ProductResponseDto].error_response("Error creating product", [str(e)])

    def update_product(self, product_id: int, dto: ProductUpdateDto) -> ApiResponse[ProductResponseDto]:
        try:
            product = self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product not found")
            changes = {
                field: value for field, value in dto.model_dump(exclude_unset=True).items()
                if value is not None or field in CLEARABLE_FIELDS
            }
            if "category_id" in changes:
                self._require_category(changes["category_id"])
            for field, value in changes.items():
                setattr(product, field, value)
            product = self.products.update(product)
            logger.info(f"Updated product {product.id}: {sorted(changes)}")
            return ApiResponse[ProductResponseDto].success_response(
                to_product_response(product), "Product updated successfully"
            )
        except ServiceError as e:
            return ApiResponse[ProductResponseDto].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error updating product {product_id}")
            return ApiResponse[ProductResponseDto].error_response("Error updating product", [str(e)])

    def delete_product(self, product_id: int) -> ApiResponse[bool]:
        try:
            product = self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product not found")
            if GenericRepository(OrderItem, self.db).first(OrderItem.product_id == product_id):
                raise ConflictError(
                    "Product has existing orders",
                    [f"{product.name} is referenced by placed orders and cannot be deleted"],
                )
            cart_items = GenericRepository(CartItem, self.db)
            for item in cart_items.find(CartItem.product_id == product_id):
                cart_items.delete(item, commit=False)
            self.products.delete(product)
            logger.info(f"Deleted product {product_id}")
            return ApiResponse[bool].success_response(True, "Product deleted successfully")
        except ServiceError as e:
            self.db.rollback()
            return ApiResponse[bool].error_response(e.message, e.errors)
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error deleting product {product_id}")
            return ApiResponse[bool].error_response("Error deleting product", [str(e)])

    def update_stock(self, product_id: int, quantity: int, commit: bool = True) -> ApiResponse[bool]:
        """Add a signed quantity to the product's stock. No floor is enforced here."""
        try:
            product = self.products.get_by_id(product_id)
            if product is None:
                return ApiResponse[bool].error_response("Product not found")
            product.stock += quantity
            self.products.update(product, commit=commit)
            return ApiResponse[bool].success_response(True, "Stock updated successfully")
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error updating stock for product {product_id}")
            return ApiResponse[bool].error_response("Error updating stock", [str(e)])

    def _require_category(self, category_id: int):
        if self.categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found", [f"No category with id {category_id}"])
