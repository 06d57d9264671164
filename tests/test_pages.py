# =============================================================================
# tests/test_pages.py - Server-Rendered Page Tests
# =============================================================================
# Form posts follow post/redirect/get, so most assertions check the 303
# target (follow_redirects=False) and then the rendered HTML.
# =============================================================================

from types import SimpleNamespace

from app.config import settings


def _auth_result(token):
    return SimpleNamespace(session=SimpleNamespace(access_token=token) if token else None)


class TestPublicPages:

    def test_landing(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Start for free" in response.text
        assert "Pro" in response.text

    def test_private_page_redirects_to_login(self, client):
        response = client.get("/dashboard", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    def test_invalid_cookie_redirects_and_clears(self, client):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "garbage")

        response = client.get("/products", follow_redirects=False)

        assert response.status_code == 303
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_login_page_redirects_when_signed_in(self, signed_in_client):
        response = signed_in_client.get("/login", follow_redirects=False)
        assert response.headers["location"] == "/dashboard"


class TestLoginAndSignup:

    def test_login_success(self, client, fake_db, user, account, make_id_token):
        token = make_id_token(user["id"], user["email"], app_metadata={"account_id": account["id"]})
        fake_db.auth.sign_in_with_password.return_value = _auth_result(token)

        response = client.post(
            "/login",
            data={"email": user["email"], "password": "secret"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert client.get("/dashboard").status_code == 200

    def test_login_failure_rerenders(self, client, fake_db):
        fake_db.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        response = client.post("/login", data={"email": "x@y.test", "password": "bad"})

        assert response.status_code == 400
        assert "Invalid email or password" in response.text
        assert 'value="x@y.test"' in response.text

    def test_signup_creates_account(self, client, fake_db, make_id_token):
        fake_db.auth.sign_up.return_value = _auth_result(make_id_token("uid-new", "nina@shop.test"))

        response = client.post(
            "/signup",
            data={"name": "Nina", "account_name": "", "email": "nina@shop.test", "password": "pw123456"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert fake_db.rows("accounts")[0]["name"] == "Nina"
        assert "Nina" in client.get("/dashboard").text

    def test_signup_needing_email_confirmation(self, client, fake_db):
        fake_db.auth.sign_up.return_value = _auth_result(None)

        response = client.post(
            "/signup",
            data={"email": "nina@shop.test", "password": "pw123456"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/login?notice=confirm_email"
        assert fake_db.rows("accounts") == []

    def test_signup_requires_password(self, client):
        response = client.post("/signup", data={"email": "nina@shop.test"})

        assert response.status_code == 400
        assert "Email and password are required." in response.text

    def test_logout(self, signed_in_client):
        response = signed_in_client.get("/logout", follow_redirects=False)

        assert response.headers["location"] == "/"
        assert signed_in_client.get("/dashboard", follow_redirects=False).status_code == 303


class TestCatalogPages:

    def test_dashboard(self, signed_in_client):
        response = signed_in_client.get("/dashboard")

        assert response.status_code == 200
        assert "Olivia" in response.text
        assert "0 / 10" in response.text

    def test_add_supply(self, signed_in_client, fake_db):
        response = signed_in_client.post(
            "/supplies/add",
            data={"name": "Rose", "description": "", "cost": "4.50", "unit": "unit"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/supplies?notice=created"
        page = signed_in_client.get("/supplies?notice=created")
        assert "Rose" in page.text
        assert "4.50" in page.text
        assert "Saved." in page.text

    def test_add_supply_invalid_cost(self, signed_in_client, fake_db):
        response = signed_in_client.post("/supplies/add", data={"name": "Rose", "cost": "-1"})

        assert response.status_code == 400
        assert "cost" in response.text
        assert fake_db.rows("supplies") == []

    def test_edit_supply_clears_description(self, signed_in_client, fake_db, account):
        supply = fake_db.add_row("supplies", {"account_id": account["id"], "name": "Rose",
                                              "description": "Long stem", "cost": 9, "unit": "unit"})

        response = signed_in_client.post(
            f"/supplies/{supply['id']}",
            data={"name": "Rose", "description": "", "cost": "9", "unit": "unit"},
            follow_redirects=False,
        )

        assert response.headers["location"] == f"/supplies/{supply['id']}?notice=updated"
        assert fake_db.get("supplies", supply["id"])["description"] is None

    def test_supplies_next_page_link(self, signed_in_client, fake_db, account):
        for i in range(3):
            fake_db.add_row("supplies", {"account_id": account["id"], "name": f"S{i}", "cost": 1, "unit": "unit"})

        page = signed_in_client.get("/supplies?page_size=2")

        assert "Next page" in page.text
        assert "3 supplies in total" in page.text

    def test_add_product_and_view_price(self, signed_in_client, fake_db, account, account_settings):
        supply = fake_db.add_row("supplies", {"account_id": account["id"], "name": "Rose",
                                              "cost": 9, "unit": "unit"})

        response = signed_in_client.post(
            "/products/add",
            data={
                "name": "Bouquet",
                "description": "",
                "supply_id": [supply["id"], "", ""],
                "quantity": ["10", "", ""],
            },
            follow_redirects=False,
        )

        assert response.status_code == 303
        product = fake_db.rows("products")[0]
        assert response.headers["location"] == f"/products/{product['id']}?notice=created"
        assert product["price"] == 200.0

        detail = signed_in_client.get(response.headers["location"])
        assert "200.00" in detail.text

    def test_add_product_without_name(self, signed_in_client, fake_db):
        response = signed_in_client.post("/products/add", data={"name": ""})

        assert response.status_code == 400
        assert fake_db.rows("products") == []

    def test_foreign_product_is_404(self, signed_in_client, fake_db, other_account):
        foreign = fake_db.add_row("products", {"account_id": other_account["id"], "name": "X"})

        assert signed_in_client.get(f"/products/{foreign['id']}").status_code == 404

    def test_delete_supply_in_use(self, signed_in_client, fake_db, account):
        supply = fake_db.add_row("supplies", {"account_id": account["id"], "name": "Rose",
                                              "cost": 9, "unit": "unit"})
        fake_db.add_row("products", {"account_id": account["id"], "name": "Bouquet",
                                     "ingredients": [{"supply_id": supply["id"], "quantity": 1}]})

        response = signed_in_client.post(f"/supplies/{supply['id']}/delete")

        assert response.status_code == 409
        assert "Supply is used by 1 product(s)" in response.text

    def test_recalculate(self, signed_in_client, fake_db, account, account_settings):
        supply = fake_db.add_row("supplies", {"account_id": account["id"], "name": "Rose", "cost": 9})
        product = fake_db.add_row("products", {
            "account_id": account["id"], "name": "Bouquet",
            "ingredients": [{"supply_id": supply["id"], "quantity": 10}],
            "price": 1, "needs_recalculation": True,
        })

        response = signed_in_client.post("/products/recalculate", follow_redirects=False)

        assert response.headers["location"] == "/products?notice=recalculated"
        assert fake_db.get("products", product["id"])["price"] == 200.0


class TestSettingsAndDemo:

    def test_update_settings(self, signed_in_client, fake_db, account_settings):
        response = signed_in_client.post(
            "/settings",
            data={"tax_rate": "10", "profit_margin": "30", "other_fixed_costs": "10",
                  "other_percentage_costs": "5"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/settings?notice=settings"
        assert fake_db.get("settings", account_settings["id"])["tax_rate"] == 10

    def test_settings_over_100_percent(self, signed_in_client, fake_db, account_settings):
        response = signed_in_client.post(
            "/settings",
            data={"tax_rate": "50", "profit_margin": "50", "other_fixed_costs": "0",
                  "other_percentage_costs": "0"},
        )

        assert response.status_code == 400
        assert "add up to 100.0%" in response.text
        assert fake_db.get("settings", account_settings["id"])["tax_rate"] == 15

    def test_demo_preview(self, signed_in_client, account_settings):
        response = signed_in_client.post("/demo", data={"supplies_cost": "90"})

        assert response.status_code == 200
        assert "200.00" in response.text

    def test_demo_rejects_negative_cost(self, signed_in_client, account_settings):
        response = signed_in_client.post("/demo", data={"supplies_cost": "-5"})
        assert response.status_code == 400
