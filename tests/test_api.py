"""End-to-end API tests through FastAPI's TestClient."""

from datetime import date

ADMIN_EMAIL = "admin@example.com"


def create_transaction(api, headers, **overrides):
    payload = {
        "date": date.today().isoformat(),
        "type": "expense",
        "category": "Rent",
        "description": "monthly",
        "amount": 100,
    }
    payload.update(overrides)
    return api.post("/api/transactions", json=payload, headers=headers)


class TestEnvelope:
    """Health, unknown routes and CORS."""

    def test_health(self, api):
        response = api.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "ok"

    def test_unknown_route(self, api):
        response = api.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_cors_allows_frontend(self, api):
        response = api.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_cors_rejects_other_origins(self, api):
        response = api.get("/api/health", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in response.headers


class TestAuthEndpoints:
    """Login, registration and /me."""

    def test_login(self, api):
        response = api.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "admin-pass"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["role"] == "admin"
        assert "password_hash" not in body["data"]["user"]

    def test_bad_credentials(self, api):
        response = api.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong!"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid email or password"}

    def test_login_missing_fields(self, api):
        response = api.post("/api/auth/login", json={"email": ADMIN_EMAIL})
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Email and password are required"

    def test_register_and_me(self, api, user_headers):
        response = api.get("/api/auth/me", headers=user_headers)
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["email"] == "bob@example.com"
        assert user["role"] == "user"

    def test_register_duplicate(self, api, user_headers):
        response = api.post(
            "/api/auth/register",
            json={"email": "bob@example.com", "password": "bob-pass", "name": "Bob"},
        )
        assert response.status_code == 409

    def test_me_without_token(self, api):
        response = api.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_me_with_bad_token(self, api):
        response = api.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestTransactionEndpoints:
    """Transaction CRUD over HTTP."""

    def test_requires_auth(self, api):
        assert api.get("/api/transactions").status_code == 401

    def test_crud(self, api, user_headers):
        created = create_transaction(api, user_headers)
        assert created.status_code == 201
        transaction = created.json()["data"]["transaction"]
        assert transaction["createdBy"] == "Bob"
        assert transaction["amount"] == 100
        tx_id = transaction["id"]

        fetched = api.get(f"/api/transactions/{tx_id}", headers=user_headers)
        assert fetched.json()["data"]["transaction"] == transaction

        updated = api.put(f"/api/transactions/{tx_id}", json={"amount": "120.5"}, headers=user_headers)
        assert updated.status_code == 200
        assert updated.json()["data"]["transaction"]["amount"] == 120.5

        listing = api.get("/api/transactions", headers=user_headers).json()["data"]
        assert listing["count"] == 1

        deleted = api.delete(f"/api/transactions/{tx_id}", headers=user_headers)
        assert deleted.json() == {"success": True, "message": "Transaction deleted successfully"}

        missing = api.get(f"/api/transactions/{tx_id}", headers=user_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Transaction not found"

    def test_validation_errors(self, api, user_headers):
        response = api.post("/api/transactions", json={"type": "gift"}, headers=user_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert {error["field"] for error in body["errors"]} == {"date", "type", "category", "amount"}

    def test_list_filters(self, api, user_headers):
        create_transaction(api, user_headers, date="2024-01-05")
        create_transaction(api, user_headers, date="2024-01-10", type="income", category="Fees", amount=500)

        response = api.get(
            "/api/transactions",
            params={"type": "income", "startDate": "2024-01-01", "endDate": "2024-01-31"},
            headers=user_headers,
        )
        data = response.json()["data"]
        assert data["count"] == 1
        assert data["transactions"][0]["category"] == "Fees"

    def test_out_of_range_date_rejected(self, api, user_headers):
        response = create_transaction(api, user_headers, date="9999-12-31T23:59:59-23:59")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "date"

    def test_oversized_amount_rejected(self, api, user_headers):
        response = create_transaction(api, user_headers, amount="1e400")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "amount"
        listing = api.get("/api/transactions", headers=user_headers).json()["data"]
        assert listing["count"] == 0

    def test_hand_edited_amount_does_not_break_reads(self, api, components, user_headers):
        create_transaction(api, user_headers, amount=100)
        components.client.append_row(
            "Transactions",
            "A:G",
            ["TXN-HAND", date.today().isoformat(), "expense", "Rent", "", "1E+400", "Sheet"],
        )

        listing = api.get("/api/transactions", headers=user_headers)
        assert listing.status_code == 200
        amounts = sorted(t["amount"] for t in listing.json()["data"]["transactions"])
        assert amounts == [0, 100]

        totals = api.get("/api/reports/balance", headers=user_headers).json()["data"]
        assert totals == {"totalIncome": 0, "totalExpense": 100, "balance": -100}
        assert api.get("/api/reports/summary", headers=user_headers).status_code == 200

    def test_backend_outage(self, api, components, user_headers):
        components.client.available = False
        response = api.get("/api/transactions", headers=user_headers)
        assert response.status_code == 503
        assert response.json()["success"] is False


class TestReportEndpoints:
    """Reports over HTTP."""

    def test_balance(self, api, user_headers):
        create_transaction(api, user_headers, amount=100)
        create_transaction(api, user_headers, type="income", category="Fees", amount=500)
        data = api.get("/api/reports/balance", headers=user_headers).json()["data"]
        assert data == {"totalIncome": 500, "totalExpense": 100, "balance": 400}

    def test_today_and_weekly_include_today(self, api, user_headers):
        create_transaction(api, user_headers)
        for path, slug in (("/api/reports/today", "today"), ("/api/reports/weekly", "week")):
            data = api.get(path, headers=user_headers).json()["data"]
            assert data["period"] == slug
            assert data["summary"]["transactionCount"] == 1
            assert data["categoryBreakdown"] == {"Rent": 100}

    def test_monthly_with_month_and_year(self, api, user_headers):
        create_transaction(api, user_headers, date="2023-12-24")
        data = api.get(
            "/api/reports/monthly",
            params={"month": 12, "year": 2023},
            headers=user_headers,
        ).json()["data"]
        assert (data["startDate"], data["endDate"]) == ("2023-12-01", "2023-12-31")
        assert data["dailyData"] == {"2023-12-24": {"income": 0, "expense": 100}}

    def test_monthly_bad_month(self, api, user_headers):
        response = api.get("/api/reports/monthly", params={"month": 13, "year": 2024}, headers=user_headers)
        assert response.status_code == 400

    def test_range_requires_both_dates(self, api, user_headers):
        response = api.get("/api/reports/range", params={"startDate": "2024-01-01"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Both startDate and endDate are required"

    def test_range(self, api, user_headers):
        create_transaction(api, user_headers, date="2024-01-05")
        data = api.get(
            "/api/reports/range",
            params={"startDate": "2024-01-01", "endDate": "2024-01-07"},
            headers=user_headers,
        ).json()["data"]
        assert data["period"] == "custom"
        assert len(data["transactions"]) == 1

    def test_summary(self, api, user_headers):
        create_transaction(api, user_headers)
        data = api.get("/api/reports/summary", headers=user_headers).json()["data"]
        assert data["transactionCount"] == 1
        assert len(data["recentTransactions"]) == 1


class TestUserEndpoints:
    """Admin-only user management."""

    def test_non_admin_forbidden(self, api, user_headers):
        response = api.get("/api/users", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Admin privileges required."

    def test_admin_crud(self, api, admin_headers):
        created = api.post(
            "/api/users",
            json={"email": "carol@example.com", "password": "carol-pass", "name": "Carol", "role": "Admin"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        carol = created.json()["data"]
        assert carol["role"] == "admin"

        listing = api.get("/api/users", headers=admin_headers).json()["data"]
        assert {u["email"] for u in listing} == {ADMIN_EMAIL, "carol@example.com"}

        updated = api.put(f"/api/users/{carol['id']}", json={"name": "Caroline"}, headers=admin_headers)
        assert updated.json()["data"]["name"] == "Caroline"

        deleted = api.delete(f"/api/users/{carol['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert api.delete(f"/api/users/{carol['id']}", headers=admin_headers).status_code == 404

    def test_duplicate_user(self, api, admin_headers):
        response = api.post(
            "/api/users",
            json={"email": ADMIN_EMAIL, "password": "123456", "name": "Copy"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_self_guards(self, api, admin_headers):
        me = api.get("/api/auth/me", headers=admin_headers).json()["data"]["user"]

        role_change = api.put(f"/api/users/{me['id']}", json={"role": "user"}, headers=admin_headers)
        assert role_change.status_code == 403
        assert role_change.json()["message"] == "You cannot change your own role"

        self_delete = api.delete(f"/api/users/{me['id']}", headers=admin_headers)
        assert self_delete.status_code == 403
