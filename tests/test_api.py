def create_product(client, admin, name="Gold Ring", price=100, stock=5, category_id=1):
    response = client.post("/api/products", headers=admin, json={
        "name": name, "price": price, "stock": stock, "categoryId": category_id, "imageUrl": "/img/x.jpg",
    })
    assert response.status_code == 200, response.json()
    return response.json()["data"]


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_register_returns_envelope(client):
    response = client.post("/api/auth/register", json={
        "firstName": "Jane", "lastName": "Doe", "email": "jane@example.com", "password": "secret123",
    })
    body = response.json()

    assert response.status_code == 200
    assert set(body) == {"success", "message", "data", "errors"}
    assert body["success"] is True
    assert body["data"]["user"]["firstName"] == "Jane"
    assert body["data"]["user"]["role"] == "User"
    assert body["data"]["token"]


def test_duplicate_registration_is_400(client, signup):
    signup(email="jane@example.com")
    response = client.post("/api/auth/register", json={
        "firstName": "Jane", "lastName": "Doe", "email": "JANE@example.com", "password": "secret123",
    })
    assert response.status_code == 400
    assert response.json()["errors"] == ["Email already exists"]


def test_invalid_payload_is_400_envelope(client):
    response = client.post("/api/auth/register", json={"firstName": "J", "email": "not-an-email"})
    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"]


def test_login_failure_is_401(client, signup):
    signup(email="jane@example.com")
    response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["errors"] == ["Invalid email or password"]


def test_login_and_profile(client, signup):
    signup(email="jane@example.com")
    token = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret123"}).json()["data"]["token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "jane@example.com"


def test_check_email(client, signup):
    signup(email="jane@example.com")
    assert client.get("/api/auth/check-email", params={"email": "jane@example.com"}).json()["data"] is True
    assert client.get("/api/auth/check-email", params={"email": "x@example.com"}).json()["data"] is False


def test_missing_or_bad_token_is_401(client):
    assert client.get("/api/cart").status_code == 401
    response = client.get("/api/cart", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_admin_routes_are_forbidden_for_customers(client, signup):
    customer = signup(email="jane@example.com")
    assert client.get("/api/order/all", headers=customer).status_code == 403
    assert client.get("/api/users", headers=customer).status_code == 403
    response = client.post("/api/products", headers=customer, json={"name": "x", "price": 1, "categoryId": 1})
    assert response.status_code == 403
    assert response.json()["message"] == "Admin role required"


def test_catalog_is_public(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    product = create_product(client, admin, name="Gold Ring")

    listing = client.get("/api/products", params={"categoryId": 1}).json()["data"]
    assert [p["name"] for p in listing] == ["Gold Ring"]
    detail = client.get(f"/api/products/{product['id']}").json()["data"]
    assert detail["categoryName"] == "Rings"
    assert detail["price"] == 100
    assert client.get("/api/products/999").status_code == 404
    assert len(client.get("/api/categories").json()["data"]) == 4


def test_admin_product_crud(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    product = create_product(client, admin)

    updated = client.put(f"/api/products/{product['id']}", headers=admin, json={"stock": 9, "price": 150.5})
    assert updated.json()["data"]["stock"] == 9
    assert updated.json()["data"]["price"] == 150.5

    negative = client.put(f"/api/products/{product['id']}", headers=admin, json={"stock": -1})
    assert negative.status_code == 400

    assert client.delete(f"/api/products/{product['id']}", headers=admin).json()["success"] is True
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_checkout_flow(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    ring = create_product(client, admin, name="Gold Ring", price=100, stock=5)
    bracelet = create_product(client, admin, name="Silver Bracelet", price=50, stock=5, category_id=4)
    customer = signup(email="jane@example.com")

    client.post("/api/cart/items", headers=customer, json={"productId": ring["id"], "quantity": 2})
    cart = client.post("/api/cart/items", headers=customer, json={"productId": bracelet["id"], "quantity": 1}).json()["data"]
    assert cart["totalAmount"] == 250
    assert cart["totalItems"] == 3

    response = client.post("/api/order/checkout", headers=customer)
    order = response.json()["data"]
    assert response.status_code == 200
    assert order["totalAmount"] == 250
    assert order["status"] == "Pending"
    assert order["userName"] == "Jane"
    assert sorted(i["subtotal"] for i in order["items"]) == [50, 200]

    assert client.get("/api/cart", headers=customer).json()["data"]["items"] == []
    assert [o["id"] for o in client.get("/api/order", headers=customer).json()["data"]] == [order["id"]]
    assert client.get(f"/api/order/{order['id']}", headers=customer).status_code == 200
    assert client.get(f"/api/products/{ring['id']}").json()["data"]["stock"] == 3

    empty = client.post("/api/order/checkout", headers=customer)
    assert empty.status_code == 400
    assert empty.json()["message"] == "Cart is empty"


def test_order_visibility_and_status_updates(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    ring = create_product(client, admin, stock=5)
    jane = signup(email="jane@example.com")
    bob = signup(email="bob@example.com", first_name="Bob")
    client.post("/api/cart/items", headers=jane, json={"productId": ring["id"], "quantity": 1})
    order_id = client.post("/api/order/checkout", headers=jane).json()["data"]["id"]

    assert client.get(f"/api/order/{order_id}", headers=bob).status_code == 404
    assert client.get(f"/api/order/{order_id}", headers=admin).status_code == 200

    first = client.get("/api/order/all", headers=admin).json()
    second = client.get("/api/order/all", headers=admin).json()
    assert first == second
    assert len(first["data"]) == 1

    bad = client.put(f"/api/order/{order_id}/status", headers=admin, json={"status": "Teleported"})
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid order status"

    ok = client.put(f"/api/order/{order_id}/status", headers=admin, json={"status": "Processing"})
    assert ok.json()["data"]["status"] == "Processing"
    assert client.put(f"/api/order/{order_id}/status", headers=jane, json={"status": "Cancelled"}).status_code == 403


def test_cart_rejects_quantity_over_stock(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    ring = create_product(client, admin, name="Diamond Ring", stock=2)
    customer = signup(email="jane@example.com")

    response = client.post("/api/cart/items", headers=customer, json={"productId": ring["id"], "quantity": 3})

    assert response.status_code == 400
    assert response.json()["message"] == "Insufficient stock for product: Diamond Ring"
    assert response.json()["errors"] == ["Only 2 items available"]


def test_admin_stats(client, signup):
    admin = signup(email="admin@example.com", role="Admin")
    create_product(client, admin, stock=1)
    stats = client.get("/api/admin/stats", headers=admin).json()["data"]
    assert stats["totalProducts"] == 1
    assert stats["totalOrders"] == 0
    assert [p["name"] for p in stats["lowStockProducts"]] == ["Gold Ring"]
