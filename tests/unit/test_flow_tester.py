"""
Unit Tests - Storefront Flow Tester
"""
from typing import Optional

import httpx
import pytest
from fastapi import FastAPI, Header, HTTPException
from pydantic import SecretStr

from droguerie.config.settings import SmokeTestSettings
from droguerie.smoke.flow_tester import FlowTester, run_smoke_test
from droguerie.smoke.scorecard import Verdict

TOKEN = "test-token"


def build_storefront_api(
    healthy: bool = True,
    login_ok: bool = True,
    admin_products_ok: bool = True,
    admin_orders_ok: bool = True,
    products: Optional[list] = None,
) -> FastAPI:
    """In-process stand-in for the storefront REST API"""
    app = FastAPI()
    catalog = products if products is not None else [
        {"id": 1, "name": "Ariel Detergent Powder 3kg", "price": 89.9, "category_name": "Cleaning Products"},
    ]
    calls = []
    app.state.calls = calls

    def require_token(authorization: Optional[str]) -> None:
        if authorization != f"Bearer {TOKEN}":
            raise HTTPException(status_code=401, detail="Unauthorized")

    @app.get("/api/health")
    async def health():
        calls.append("health")
        if not healthy:
            raise HTTPException(status_code=503, detail="Database unavailable")
        return {"success": True, "environment": "test", "version": "1.0.0"}

    @app.get("/api/products")
    async def list_products():
        calls.append("products")
        return catalog

    @app.get("/api/products/{product_id}")
    async def product_detail(product_id: int):
        for product in catalog:
            if product["id"] == product_id:
                return product
        raise HTTPException(status_code=404, detail="Not found")

    @app.post("/api/auth/register")
    async def register(payload: dict):
        calls.append(payload["email"])
        return {"success": True}

    @app.post("/api/auth/login")
    async def login(payload: dict):
        if not login_ok:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return {"success": True, "token": TOKEN, "user": {"id": 42, "email": payload["email"]}}

    @app.post("/api/cart")
    async def add_to_cart(payload: dict, authorization: Optional[str] = Header(None)):
        require_token(authorization)
        calls.append(f"cart:{payload['productId']}x{payload['quantity']}")
        return {"success": True}

    @app.get("/api/cart")
    async def get_cart(authorization: Optional[str] = Header(None)):
        require_token(authorization)
        return [{"product_id": 1, "quantity": 2}]

    @app.post("/api/orders")
    async def create_order(payload: dict, authorization: Optional[str] = Header(None)):
        require_token(authorization)
        calls.append(f"order:{payload['paymentMethod']}")
        return {"success": True, "order": {"id": 501}}

    @app.get("/api/admin/products")
    async def admin_products(authorization: Optional[str] = Header(None)):
        require_token(authorization)
        if not admin_products_ok:
            raise HTTPException(status_code=403, detail="Forbidden")
        return {"products": catalog}

    @app.get("/api/admin/orders")
    async def admin_orders(authorization: Optional[str] = Header(None)):
        require_token(authorization)
        if not admin_orders_ok:
            raise HTTPException(status_code=500, detail="Server error")
        return {"orders": [{"id": 501}]}

    return app


def build_tester(app: FastAPI) -> FlowTester:
    return FlowTester(
        smoke=SmokeTestSettings(api_base_url="http://testserver/api"),
        login_email="admin@drogueriejamal.ma",
        login_password=SecretStr("Test-Admin-Pass-42"),
        transport=httpx.ASGITransport(app=app),
    )


class TestFlowTester:
    """Tests for FlowTester"""

    async def test_all_checks_pass(self):
        app = build_storefront_api()
        tester = build_tester(app)

        scorecard = await tester.run()

        assert all(scorecard.as_dict().values())
        assert scorecard.verdict == Verdict.FULL_PASS
        assert tester.auth_token == TOKEN
        assert tester.user_id == 42
        assert "cart:1x2" in app.state.calls
        assert "order:cash_on_delivery" in app.state.calls

    async def test_failed_login_skips_gated_checks(self):
        """Test no token means cart, order and admin checks are recorded as not passed"""
        scorecard = await build_tester(build_storefront_api(login_ok=False)).run()

        results = scorecard.as_dict()
        assert results["health_check"] is True
        assert results["product_listing"] is True
        assert results["user_login"] is False
        for check_id in ("add_to_cart", "cart_retrieval", "order_creation",
                         "admin_access", "admin_products", "admin_orders"):
            assert results[check_id] is False
            assert "skipped" in scorecard[check_id].detail

    async def test_admin_access_is_either_endpoint(self):
        scorecard = await build_tester(build_storefront_api(admin_orders_ok=False)).run()

        assert scorecard["admin_products"].passed is True
        assert scorecard["admin_orders"].passed is False
        assert scorecard["admin_access"].passed is True
        assert scorecard.verdict == Verdict.MOSTLY_FUNCTIONAL

    async def test_admin_access_fails_when_both_fail(self):
        scorecard = await build_tester(
            build_storefront_api(admin_products_ok=False, admin_orders_ok=False)
        ).run()

        assert scorecard["admin_access"].passed is False

    async def test_health_failure_only_fails_its_step(self):
        scorecard = await build_tester(build_storefront_api(healthy=False)).run()

        assert scorecard["health_check"].passed is False
        assert "503" in scorecard["health_check"].detail
        assert scorecard["user_login"].passed is True
        assert scorecard.passed_count == 10

    async def test_empty_listing_fails(self):
        scorecard = await build_tester(build_storefront_api(products=[])).run()

        assert scorecard["product_listing"].passed is False
        assert scorecard["product_detail"].passed is False

    async def test_registration_uses_unique_email(self):
        app = build_storefront_api()

        await build_tester(app).run()

        registered = [c for c in app.state.calls if c.startswith("test") and c.endswith("@example.com")]
        assert len(registered) == 1

    async def test_unreachable_api_fails_every_check(self):
        """Test transport errors are recorded rather than raised"""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        tester = FlowTester(
            smoke=SmokeTestSettings(api_base_url="http://testserver/api"),
            login_email="admin@drogueriejamal.ma",
            login_password=SecretStr("x"),
            transport=httpx.MockTransport(refuse),
        )

        scorecard = await tester.run()

        assert scorecard.passed_count == 0
        assert scorecard.verdict == Verdict.NEEDS_ATTENTION

    async def test_listing_timeout_fails_only_listing(self):
        """Test a listing read timeout fails one item and the listing call gets the longer timeout"""
        timeouts = {}

        def storefront(request: httpx.Request) -> httpx.Response:
            route = (request.method, request.url.path)
            timeouts[route] = request.extensions["timeout"]["read"]
            if route == ("GET", "/api/products"):
                raise httpx.ReadTimeout("timed out", request=request)
            responses = {
                ("GET", "/api/health"): {"success": True},
                ("GET", "/api/products/1"): {"id": 1, "name": "Ariel", "category_name": "Cleaning"},
                ("POST", "/api/auth/register"): {"success": True},
                ("POST", "/api/auth/login"): {"success": True, "token": TOKEN, "user": {"id": 42}},
                ("POST", "/api/cart"): {"success": True},
                ("GET", "/api/cart"): [],
                ("POST", "/api/orders"): {"success": True, "order": {"id": 501}},
                ("GET", "/api/admin/products"): {"products": [{"id": 1}]},
                ("GET", "/api/admin/orders"): {"orders": [{"id": 501}]},
            }
            return httpx.Response(200, json=responses[route])

        tester = FlowTester(
            smoke=SmokeTestSettings(api_base_url="http://testserver/api"),
            login_email="admin@drogueriejamal.ma",
            login_password=SecretStr("x"),
            transport=httpx.MockTransport(storefront),
        )

        scorecard = await tester.run()

        assert scorecard["product_listing"].passed is False
        assert scorecard.passed_count == 10
        assert timeouts.pop(("GET", "/api/products")) == 10.0
        assert set(timeouts.values()) == {5.0}

    async def test_state_is_reset_between_runs(self):
        """Test a rerun does not reuse the previous token or results"""
        tester = build_tester(build_storefront_api())
        first = await tester.run()
        assert tester.auth_token == TOKEN

        tester.transport = httpx.ASGITransport(app=build_storefront_api(login_ok=False))
        second = await tester.run()

        assert second is not first
        assert first.passed_count == 11
        assert tester.auth_token is None
        assert tester.user_id is None
        assert second["user_login"].passed is False
        assert "skipped" in second["add_to_cart"].detail


class TestRunSmokeTest:
    """Tests for run_smoke_test()"""

    async def test_prints_all_sections_after_failed_login(self, test_settings, capsys):
        scorecard = await run_smoke_test(
            test_settings,
            transport=httpx.ASGITransport(app=build_storefront_api(login_ok=False)),
        )

        out = capsys.readouterr().out
        assert "🔧 Core API:" in out
        assert "👤 User Flow:" in out
        assert "👨‍💼 Admin Panel:" in out
        assert f"{scorecard.passed_count}/11 tests passed" in out
        assert "Test-Admin-Pass-42" not in out


@pytest.mark.parametrize("timeout_ms,expected", [(5000, 5.0), (250, 0.25)])
def test_timeout_seconds(timeout_ms, expected):
    assert SmokeTestSettings(timeout_ms=timeout_ms).timeout_seconds == expected
