from conftest import USER_ID, cart_json, make_response, product_json

CART = f"/carrito/{USER_ID}"


def login_page(client, http, user_id=USER_ID, status=200):
    http.add("GET", f"/users/{user_id}", make_response(status))
    return client.post("/login", data={"user_id": user_id})


def test_catalog_lists_products(client, http):
    http.add("GET", "/Products/all", make_response(200, [product_json(), product_json("p2", "Red Hat", 10)]))

    r = client.get("/")

    assert r.status_code == 200
    assert b"Blue Shirt" in r.data
    assert b"Red Hat" in r.data
    assert b"$25000.00" in r.data


def test_catalog_backend_down_shows_empty_state(client, http):
    http.add("GET", "/Products/all", make_response(500))

    r = client.get("/")

    assert r.status_code == 200
    assert b"Catalog is empty" in r.data


def test_product_detail_renders_stars_and_seed_comments(client, http):
    http.add("GET", "/products/id/p1", make_response(200, product_json(calificacion=9)))

    r = client.get("/products/p1")

    assert r.status_code == 200
    assert "⭐⭐⭐⭐⭐⭐" not in r.get_data(as_text=True)
    assert "⭐⭐⭐⭐⭐" in r.get_data(as_text=True)
    assert b"User comments (3)" in r.data


def test_product_detail_404(client, http):
    http.add("GET", "/products/id/nope", make_response(404))

    r = client.get("/products/nope")

    assert r.status_code == 404
    assert b"Not found" in r.data


def test_comment_form_prepends_comment(client, http):
    http.add("GET", "/products/id/p1", make_response(200, product_json()))
    http.add(
        "POST",
        "/comments/p1",
        make_response(201, {"_id": "c9", "content": "Lovely fabric", "rating": 5, "user": "someone", "productId": "p1", "createdAt": "2025-12-01T00:00:00Z"}),
    )

    r = client.post("/products/p1/comments", data={"content": "Lovely fabric", "rating": "5"})

    assert r.status_code == 201
    assert b"User comments (4)" in r.data
    assert b"Lovely fabric" in r.data


def test_comment_form_invalid(client, http):
    http.add("GET", "/products/id/p1", make_response(200, product_json()))

    r = client.post("/products/p1/comments", data={"content": "", "rating": "0"})

    assert r.status_code == 400
    assert b"Please pick a rating" in r.data
    assert not http.calls_to("POST", "/comments/p1")


def test_login_and_logout(client, http):
    r = login_page(client, http)
    assert r.status_code == 302

    with client.session_transaction() as sess:
        assert sess["user_session_id"] == USER_ID

    r = client.post("/logout")
    assert r.status_code == 302
    with client.session_transaction() as sess:
        assert "user_session_id" not in sess


def test_login_unknown_user(client, http):
    r = login_page(client, http, "ghost", status=404)

    assert r.status_code == 302
    with client.session_transaction() as sess:
        assert "user_session_id" not in sess


def test_blank_login_uses_demo_user(client, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200))

    client.post("/login", data={"user_id": "  "})

    with client.session_transaction() as sess:
        assert sess["user_session_id"] == USER_ID


def test_cart_page_requires_login(client):
    r = client.get("/cart")
    assert r.status_code == 302
    assert "/login" in r.headers["Location"]


def test_cart_page_shows_backend_total(client, http):
    login_page(client, http)
    http.add("GET", CART, make_response(200, cart_json(total=99.5)))

    r = client.get("/cart")

    assert r.status_code == 200
    assert b"TOTAL: $99.50" in r.data
    assert b"Total items: 3" in r.data


def test_cart_remove_failure_keeps_cart_visible(client, http):
    login_page(client, http)
    http.add("DELETE", "/carrito/ghost", make_response(404, {"message": "Item not found"}))
    http.add("GET", CART, make_response(200, cart_json()))

    r = client.post("/cart/items/ghost/remove")

    assert b"Item not found" in r.data
    assert b"Blue Shirt" in r.data


def test_checkout_page(client, http):
    login_page(client, http)
    http.add("GET", CART, make_response(200, cart_json()), make_response(404))
    http.add("DELETE", f"/carrito/clear/{USER_ID}", make_response(200))

    r = client.post("/cart/checkout")

    assert b"purchase completed" in r.data


def test_add_to_cart_from_detail(client, http):
    login_page(client, http)
    http.add("POST", "/carrito/post", make_response(201, cart_json()))

    r = client.post("/products/p1/cart", data={"quantity": "2", "product_name": "Blue Shirt"}, follow_redirects=False)

    assert r.status_code == 302
    with client.session_transaction() as sess:
        flashes = sess["_flashes"]
    assert ("success", '2 unit(s) of "Blue Shirt" added to the cart!') in flashes


def test_add_to_cart_requires_session(client, http):
    client.post("/products/p1/cart", data={"quantity": "1"})

    with client.session_transaction() as sess:
        assert sess["_flashes"][0][0] == "error"
    assert not http.calls_to("POST", "/carrito/post")


def test_new_product_validation(client, http):
    r = client.post("/products/new", data={"name": "", "price": "0"})

    assert r.status_code == 400
    assert b"price above zero" in r.data
    assert http.calls == []


def test_new_product_created(client, http):
    http.add("POST", "/products/add", make_response(201, product_json("p7", "Green Scarf", 30)))

    r = client.post("/products/new", data={"name": "Green Scarf", "price": "30", "stock": "4", "rating": "5"})

    assert r.status_code == 302
    sent = http.calls_to("POST", "/products/add")[0].json
    assert sent["nombre"] == "Green Scarf"
    assert sent["stock"] == 4
