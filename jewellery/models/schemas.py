from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# decimals go over the wire as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every endpoint."""

    success: bool
    message: str = ""
    data: Optional[T] = None
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def success_response(cls, data=None, message: str = "Operation successful"):
        return cls(success=True, message=message, data=data, errors=[])

    @classmethod
    def error_response(cls, message: str, errors: Optional[List[str]] = None):
        return cls(success=False, message=message, data=None, errors=errors or [])


# Auth / users

class UserDto(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = Field(None, max_length=20)
    role: Optional[str] = None

class LoginDto(CamelModel):
    email: str
    password: str

class UserResponseDto(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    role: str

class AuthResponseDto(CamelModel):
    token: str
    user: UserResponseDto


# Catalog

class CategoryDto(CamelModel):
    id: int
    name: str

class ProductCreateDto(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: int

class ProductUpdateDto(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None

class ProductResponseDto(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    stock: int
    image_url: Optional[str] = None
    category_id: int
    category_name: str


# Cart

class AddToCartDto(CamelModel):
    product_id: int
    quantity: int = Field(1, gt=0)

class UpdateCartItemDto(CamelModel):
    quantity: int = Field(..., gt=0)

class CartItemResponseDto(CamelModel):
    id: int
    product_id: int
    product_name: str
    image_url: Optional[str] = None
    price: Money
    quantity: int
    subtotal: Money

class CartResponseDto(CamelModel):
    id: Optional[int] = None
    user_id: int
    items: List[CartItemResponseDto] = Field(default_factory=list)
    total_items: int = 0
    total_amount: Money = Decimal("0")


# Orders

class OrderStatusUpdateDto(CamelModel):
    status: str

class OrderItemResponseDto(CamelModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    subtotal: Money

class OrderResponseDto(CamelModel):
    id: int
    user_id: int
    order_date: datetime
    status: str
    total_amount: Money
    items: List[OrderItemResponseDto] = Field(default_factory=list)
    user_name: str


# Admin dashboard

class MonthlyRevenueDto(CamelModel):
    month: str
    revenue: Money

class DashboardStatsDto(CamelModel):
    total_orders: int
    total_products: int
    total_revenue: Money
    recent_orders: List[OrderResponseDto] = Field(default_factory=list)
    low_stock_products: List[ProductResponseDto] = Field(default_factory=list)
    monthly_revenue: List[MonthlyRevenueDto] = Field(default_factory=list)
