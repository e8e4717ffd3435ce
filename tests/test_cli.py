import pytest

from conftest import USER_ID, cart_json, make_response, product_json


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def shop(runner, *args):
    return runner.invoke(args=["shop", *args])


def test_login_persists_across_invocations(runner, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200))

    result = shop(runner, "login", USER_ID)
    assert result.exit_code == 0, result.output
    assert f"Logged in as {USER_ID}" in result.output

    # a later invocation restores (and re-checks) the stored id
    result = shop(runner, "whoami")
    assert f"Session: {USER_ID}" in result.output
    assert len(http.calls_to("GET", f"/users/{USER_ID}")) == 2


def test_restore_fails_closed_when_user_disappears(runner, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200), make_response(404))

    shop(runner, "login", USER_ID)
    result = shop(runner, "whoami")

    assert "Not logged in." in result.output


def test_restore_trusts_stored_id_when_revalidation_is_off(app, runner, http):
    app.config["SESSION_REVALIDATE_ON_RESTORE"] = False
    http.add("GET", f"/users/{USER_ID}", make_response(200))

    shop(runner, "login", USER_ID)
    result = shop(runner, "whoami")

    assert f"Session: {USER_ID}" in result.output
    assert len(http.calls_to("GET", f"/users/{USER_ID}")) == 1


def test_logout_then_whoami(runner, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200))
    shop(runner, "login", USER_ID)

    assert "Logged out." in shop(runner, "logout").output
    assert "Not logged in." in shop(runner, "whoami").output


def test_login_rejected(runner, http):
    http.add("GET", "/users/ghost", make_response(404))

    result = shop(runner, "login", "ghost")

    assert result.exit_code != 0
    assert "not found or invalid" in result.output


def test_cart_requires_login(runner):
    result = shop(runner, "cart")
    assert result.exit_code != 0
    assert "Not logged in" in result.output


def test_cart_remove_and_checkout(runner, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200))
    http.add("GET", f"/carrito/{USER_ID}", make_response(200, cart_json()))
    shop(runner, "login", USER_ID)

    result = shop(runner, "cart")
    assert "Shopping cart - 3 item(s)" in result.output
    assert "TOTAL: $60000.00" in result.output

    http.add("DELETE", "/carrito/ghost", make_response(404, {"message": "Item not found"}))
    result = shop(runner, "remove", "ghost")
    assert result.exit_code != 0
    assert "Item not found" in result.output

    http.add("DELETE", f"/carrito/clear/{USER_ID}", make_response(200))
    result = shop(runner, "checkout")
    assert result.exit_code == 0, result.output
    assert "Purchase completed!" in result.output


def test_products_and_product(runner, http):
    http.add("GET", "/Products/all", make_response(200, [product_json()]))
    http.add("GET", "/products/id/p1", make_response(200, product_json(calificacion=3)))

    assert "Blue Shirt" in shop(runner, "products").output
    result = shop(runner, "product", "p1")
    assert "Rating: ⭐⭐⭐ (3 / 5)" in result.output


def test_comment_validation_has_no_network(runner, http):
    result = shop(runner, "comment", "p1", "--rating", "0", "--content", "hi")
    assert result.exit_code != 0
    assert http.calls == []


def test_create_product(runner, http):
    http.add("POST", "/products/add", make_response(201, product_json("p7", "Green Scarf", 30)))

    result = shop(runner, "create-product", "--name", "Green Scarf", "--price", "30")

    assert result.exit_code == 0, result.output
    assert 'Product "Green Scarf" created! ID: p7' in result.output
