from decimal import Decimal

from sqlalchemy import func, select

from jewellery.models.entities import Order, OrderItem, Product
from jewellery.models.schemas import OrderStatusUpdateDto, ProductUpdateDto
from jewellery.services.cart_service import CartService
from jewellery.services.order_service import OrderService
from jewellery.services.product_service import ProductService


def order_count(db):
    return db.scalar(select(func.count()).select_from(Order))


def stock_of(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).stock


def place(db, emails, user_id):
    return OrderService(db, email_service=emails).create_order_from_cart(user_id)


def test_checkout_builds_order_and_clears_cart(db, emails, make_user, make_product):
    user = make_user()
    ring = make_product("Gold Ring", price="100", stock=5)
    bracelet = make_product("Silver Bracelet", price="50", stock=3, category="Bracelets")
    carts = CartService(db)
    carts.add_to_cart(user.id, ring.id, 2)
    carts.add_to_cart(user.id, bracelet.id, 1)

    response = place(db, emails, user.id)

    assert response.success, response.errors
    assert response.message == "Order created successfully"
    order = response.data
    assert order.total_amount == Decimal("250")
    assert order.status == "Pending"
    assert order.user_id == user.id
    assert order.user_name == "Jane"
    lines = {item.product_name: item for item in order.items}
    assert lines["Gold Ring"].unit_price == Decimal("100")
    assert lines["Gold Ring"].subtotal == Decimal("200")
    assert lines["Silver Bracelet"].subtotal == Decimal("50")
    assert len(order.items) == 2

    assert carts.get_cart_by_user_id(user.id).data.items == []
    assert stock_of(db, ring.id) == 3
    assert stock_of(db, bracelet.id) == 2
    assert emails.sent[-1] == ("confirmation", "jane@example.com", order.id, "Pending")


def test_empty_cart_is_rejected(db, emails, make_user):
    user = make_user()
    response = place(db, emails, user.id)
    assert not response.success
    assert response.message == "Cart is empty"
    assert order_count(db) == 0


def test_insufficient_stock_names_product_and_persists_nothing(db, emails, make_user, make_product):
    user = make_user()
    ring = make_product("Gold Ring", price="100", stock=5)
    CartService(db).add_to_cart(user.id, ring.id, 3)
    ProductService(db).update_product(ring.id, ProductUpdateDto(stock=2))

    response = place(db, emails, user.id)

    assert not response.success
    assert response.message == "Insufficient stock for product: Gold Ring"
    assert response.errors == ["Only 2 items available"]
    assert order_count(db) == 0
    assert stock_of(db, ring.id) == 2
    assert len(CartService(db).get_cart_by_user_id(user.id).data.items) == 1


def test_failure_on_later_item_rolls_back_earlier_decrements(db, emails, make_user, make_product):
    user = make_user()
    ring = make_product("Gold Ring", price="100", stock=5)
    necklace = make_product("Pearl Necklace", price="300", stock=4, category="Necklaces")
    carts = CartService(db)
    carts.add_to_cart(user.id, ring.id, 2)
    carts.add_to_cart(user.id, necklace.id, 3)
    ProductService(db).update_product(necklace.id, ProductUpdateDto(stock=1))

    response = place(db, emails, user.id)

    assert not response.success
    assert "Pearl Necklace" in response.message
    assert stock_of(db, ring.id) == 5
    assert stock_of(db, necklace.id) == 1
    assert order_count(db) == 0
    assert db.scalar(select(func.count()).select_from(OrderItem)) == 0


def test_order_keeps_price_at_purchase(db, emails, make_user, make_product):
    user = make_user()
    ring = make_product("Gold Ring", price="100", stock=5)
    CartService(db).add_to_cart(user.id, ring.id, 1)
    order_id = place(db, emails, user.id).data.id

    ProductService(db).update_product(ring.id, ProductUpdateDto(price=Decimal("180")))

    order = OrderService(db, email_service=emails).get_order_by_id(order_id).data
    assert order.items[0].unit_price == Decimal("100")
    assert order.total_amount == Decimal("100")


def test_get_order_hides_other_users_orders(db, emails, make_user, make_product):
    jane = make_user()
    bob = make_user(email="bob@example.com", first_name="Bob")
    ring = make_product(stock=5)
    CartService(db).add_to_cart(jane.id, ring.id, 1)
    order_id = place(db, emails, jane.id).data.id
    service = OrderService(db, email_service=emails)

    assert service.get_order_by_id(order_id, jane.id).success
    assert service.get_order_by_id(order_id, bob.id).message == "Order not found"
    assert service.get_order_by_id(order_id).success
    assert [o.id for o in service.get_user_orders(jane.id).data] == [order_id]
    assert service.get_user_orders(bob.id).data == []


def test_get_all_orders_is_repeatable(db, emails, make_user, make_product):
    jane = make_user()
    bob = make_user(email="bob@example.com", first_name="Bob")
    ring = make_product(stock=5)
    for user in (jane, bob):
        CartService(db).add_to_cart(user.id, ring.id, 1)
        place(db, emails, user.id)
    service = OrderService(db, email_service=emails)

    first = service.get_all_orders()
    second = service.get_all_orders()

    assert len(first.data) == 2
    assert first.model_dump() == second.model_dump()
    assert {o.user_name for o in first.data} == {"Jane", "Bob"}


def make_order(db, emails, make_user, make_product):
    user = make_user()
    ring = make_product(stock=5)
    CartService(db).add_to_cart(user.id, ring.id, 1)
    return place(db, emails, user.id).data.id


def set_status(db, emails, order_id, status):
    return OrderService(db, email_service=emails).update_order_status(order_id, OrderStatusUpdateDto(status=status))


def test_invalid_status_leaves_order_unchanged(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)

    response = set_status(db, emails, order_id, "Lost")

    assert not response.success
    assert response.message == "Invalid order status"
    assert response.errors == ["Valid statuses are: Pending, Processing, Shipped, Delivered, Cancelled"]
    db.expire_all()
    assert db.get(Order, order_id).status == "Pending"


def test_status_follows_fulfilment_path(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)

    for status in ("Processing", "Shipped", "Delivered"):
        response = set_status(db, emails, order_id, status)
        assert response.success, response.errors
        assert response.data.status == status

    assert [e[3] for e in emails.sent if e[0] == "status"] == ["Processing", "Shipped", "Delivered"]


def test_admin_can_reopen_delivered_order(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)
    for status in ("Processing", "Shipped", "Delivered"):
        set_status(db, emails, order_id, status)

    response = set_status(db, emails, order_id, "Pending")

    assert response.success, response.errors
    assert response.data.status == "Pending"
    db.expire_all()
    assert db.get(Order, order_id).status == "Pending"


def test_any_valid_status_can_follow_any_other(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)

    for status in ("Delivered", "Pending", "Shipped", "Cancelled", "Processing", "Delivered", "Cancelled"):
        response = set_status(db, emails, order_id, status)
        assert response.success, (status, response.message)
        assert response.data.status == status

    assert [e[3] for e in emails.sent if e[0] == "status"][-1] == "Cancelled"


def test_setting_same_status_is_a_noop(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)
    response = set_status(db, emails, order_id, "Pending")
    assert response.success
    assert not [e for e in emails.sent if e[0] == "status"]


def test_cancelled_order_can_be_restored(db, emails, make_user, make_product):
    order_id = make_order(db, emails, make_user, make_product)
    assert set_status(db, emails, order_id, "Cancelled").success
    assert set_status(db, emails, order_id, "Processing").data.status == "Processing"


def test_missing_order(db, emails):
    assert set_status(db, emails, 404, "Shipped").message == "Order not found"
