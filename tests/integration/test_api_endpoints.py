"""End-to-end tests of the HTTP surface on in-memory storage.

The client is not used as a context manager, so the application lifespan
(database pool, bootstrap admin) never runs; every test gets fresh
repositories through a dependency override.
"""

from collections.abc import Iterator
from typing import Any
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from healthplan_admin.api.dependencies import get_repositories
from healthplan_admin.core.security import Security
from healthplan_admin.main import app
from healthplan_admin.repositories import Repositories

pytestmark = pytest.mark.integration

API = "/api/v1"


@pytest.fixture
def client(repos: Repositories) -> Iterator[TestClient]:
    app.dependency_overrides[get_repositories] = lambda: repos
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(
    security: Security, user_type: str, insurance_company_id: UUID | str | None = None
) -> dict[str, str]:
    issued = security.create_access_token(
        subject=str(uuid4()),
        user_type=user_type,
        insurance_company_id=str(insurance_company_id) if insurance_company_id else None,
    )
    return {"Authorization": f"Bearer {issued.access_token}"}


@pytest.fixture
def admin_headers(security: Security) -> dict[str, str]:
    return bearer(security, "ADMIN")


def create_company(
    client: TestClient, headers: dict[str, str], code: str = "ACME"
) -> dict[str, Any]:
    response = client.post(
        f"{API}/insurance-companies/",
        json={
            "name": f"{code} Health",
            "code": code,
            "email": "contact@acmehealth.com",
            "phone": "+15550100",
            "address": "1 Main Street",
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_member(
    client: TestClient, headers: dict[str, str], company_id: str
) -> dict[str, Any]:
    response = client.post(
        f"{API}/members/",
        json={
            "insuranceCompanyId": company_id,
            "firstName": "Maria",
            "lastName": "Santos",
            "dateOfBirth": "1988-04-02T00:00:00Z",
            "gender": "Female",
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestPublicEndpoints:
    def test_root(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "HealthPlan Admin"
        assert body["status"] == "operational"

    def test_health_on_memory_storage(self, client: TestClient) -> None:
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["storageBackend"] == "memory"
        assert body["database"] is None

    def test_liveness(self, client: TestClient) -> None:
        response = client.get(f"{API}/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthentication:
    def test_login_and_me(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        company = create_company(client, admin_headers)
        created = client.post(
            f"{API}/auth/users",
            json={
                "username": "acme.ops",
                "email": "ops@acmehealth.com",
                "password": "s3cure-passw0rd",
                "userType": "INSURANCE_ADMIN",
                "insuranceCompanyId": company["id"],
            },
            headers=admin_headers,
        )
        assert created.status_code == 201, created.text
        assert "passwordHash" not in created.json()

        login = client.post(
            f"{API}/auth/login",
            json={"username": "acme.ops", "password": "s3cure-passw0rd"},
        )
        assert login.status_code == 200, login.text
        token = login.json()
        assert token["tokenType"] == "bearer"

        me = client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {token['accessToken']}"}
        )
        assert me.status_code == 200
        assert me.json()["userType"] == "INSURANCE_ADMIN"
        assert me.json()["insuranceCompanyId"] == company["id"]

    def test_bad_credentials(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/auth/login", json={"username": "nobody", "password": "whatever-pass"}
        )
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "UNAUTHORIZED"

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get(
            f"{API}/analytics/dashboard", params={"insuranceCompanyId": str(uuid4())}
        )
        assert response.status_code == 401

    def test_garbage_token(self, client: TestClient) -> None:
        response = client.get(
            f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_only_platform_admin_creates_accounts(
        self, client: TestClient, security: Security
    ) -> None:
        response = client.post(
            f"{API}/auth/users",
            json={
                "username": "sneaky",
                "email": "sneaky@acmehealth.com",
                "password": "s3cure-passw0rd",
                "userType": "ADMIN",
            },
            headers=bearer(security, "INSURANCE_ADMIN", uuid4()),
        )
        assert response.status_code == 403


class TestAuthorization:
    def test_role_gate(self, client: TestClient, security: Security) -> None:
        company_id = uuid4()
        response = client.get(
            f"{API}/analytics/dashboard",
            params={"insuranceCompanyId": str(company_id)},
            headers=bearer(security, "MEMBER", company_id),
        )
        assert response.status_code == 403

    def test_tenant_guard_on_query(
        self, client: TestClient, security: Security, admin_headers: dict[str, str]
    ) -> None:
        own = create_company(client, admin_headers, "OWN")
        other = create_company(client, admin_headers, "OTHER")
        headers = bearer(security, "INSURANCE_ADMIN", own["id"])

        allowed = client.get(
            f"{API}/analytics/dashboard",
            params={"insuranceCompanyId": own["id"]},
            headers=headers,
        )
        assert allowed.status_code == 200

        denied = client.get(
            f"{API}/analytics/dashboard",
            params={"insuranceCompanyId": other["id"]},
            headers=headers,
        )
        assert denied.status_code == 403

    def test_tenant_guard_on_records(
        self, client: TestClient, security: Security, admin_headers: dict[str, str]
    ) -> None:
        own = create_company(client, admin_headers, "OWN")
        other = create_company(client, admin_headers, "OTHER")
        member = create_member(client, admin_headers, other["id"])
        headers = bearer(security, "INSURANCE_ADMIN", own["id"])

        def status_of(path: str) -> int:
            return client.get(f"{API}{path}", headers=headers).status_code

        assert status_of(f"/insurance-companies/{own['id']}") == 200
        assert status_of(f"/insurance-companies/{other['id']}") == 403
        assert status_of(f"/members/{member['id']}") == 403


class TestAnalyticsEndpoints:
    def test_dashboard_of_empty_company(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        response = client.get(
            f"{API}/analytics/dashboard",
            params={"insuranceCompanyId": company["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["activeMembers"] == 0
        assert body["pendingClaims"] == 0
        assert body["expiringPolicies"] == 0
        assert len(body["demographics"]) == 8
        assert "financialSummary" in body

    def test_inverted_date_range(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        response = client.get(
            f"{API}/analytics/financial-summary",
            params={
                "insuranceCompanyId": str(uuid4()),
                "startDate": "2025-06-30",
                "endDate": "2025-06-01",
            },
            headers=admin_headers,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "INVALID_REQUEST"
        assert body["error"].startswith("Invalid date range")

    @pytest.mark.parametrize(
        "path", ["financial-summary", "claims", "members", "providers", "policies"]
    )
    def test_windowed_reports(
        self, client: TestClient, admin_headers: dict[str, str], path: str
    ) -> None:
        response = client.get(
            f"{API}/analytics/{path}",
            params={
                "insuranceCompanyId": str(uuid4()),
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        assert response.json()["period"] == {
            "startDate": "2025-01-01",
            "endDate": "2025-12-31",
        }

    def test_monthly_revenue(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        params = {"insuranceCompanyId": str(uuid4()), "year": 2025}
        response = client.get(
            f"{API}/analytics/monthly-revenue", params=params, headers=admin_headers
        )
        assert response.status_code == 200
        assert [row["month"] for row in response.json()] == list(range(1, 13))

        params["year"] = 12
        response = client.get(
            f"{API}/analytics/monthly-revenue", params=params, headers=admin_headers
        )
        assert response.status_code == 400

    def test_missing_window_is_a_validation_error(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        response = client.get(
            f"{API}/analytics/claims",
            params={"insuranceCompanyId": str(uuid4())},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestCrudFlows:
    def test_duplicate_company(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        create_company(client, admin_headers)
        response = client.post(
            f"{API}/insurance-companies/",
            json={
                "name": "ACME Health",
                "code": "ACME2",
                "email": "contact@acmehealth.com",
                "phone": "+15550100",
                "address": "1 Main Street",
            },
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"

    def test_unknown_record(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.get(f"{API}/policy-contracts/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_contract_lifecycle(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        member = create_member(client, admin_headers, company["id"])

        created = client.post(
            f"{API}/policy-contracts/",
            json={
                "insuranceCompanyId": company["id"],
                "memberId": member["id"],
                "policyType": "Health",
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
                "premium": "1200.00",
            },
            headers=admin_headers,
        )
        assert created.status_code == 201, created.text
        contract = created.json()
        assert contract["status"] == "PENDING"

        invalid = client.patch(
            f"{API}/policy-contracts/{contract['id']}/status",
            json={"status": "EXPIRED"},
            headers=admin_headers,
        )
        assert invalid.status_code == 400

        activated = client.patch(
            f"{API}/policy-contracts/{contract['id']}/status",
            json={"status": "ACTIVE"},
            headers=admin_headers,
        )
        assert activated.status_code == 200
        assert activated.json()["status"] == "ACTIVE"

        listed = client.get(
            f"{API}/policy-contracts/",
            params={"insuranceCompanyId": company["id"], "status": "ACTIVE"},
            headers=admin_headers,
        )
        assert listed.status_code == 200
        assert listed.json()["total"] == 1

        dashboard = client.get(
            f"{API}/analytics/dashboard",
            params={"insuranceCompanyId": company["id"]},
            headers=admin_headers,
        )
        assert dashboard.json()["activeMembers"] == 1

    def test_member_list_pagination(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        for _ in range(3):
            create_member(client, admin_headers, company["id"])

        response = client.get(
            f"{API}/members/",
            params={"insuranceCompanyId": company["id"], "skip": 1, "limit": 1},
            headers=admin_headers,
        )
        assert response.status_code == 200
        page = response.json()
        assert page["total"] == 3
        assert len(page["items"]) == 1

        response = client.get(
            f"{API}/members/",
            params={"insuranceCompanyId": company["id"], "limit": 0},
            headers=admin_headers,
        )
        assert response.status_code == 400


def create_product(
    client: TestClient, headers: dict[str, str], company_id: str
) -> dict[str, Any]:
    response = client.post(
        f"{API}/policy-products/",
        json={
            "insuranceCompanyId": company_id,
            "code": "FAM-1",
            "name": "Family Care",
            "description": "Family outpatient cover",
            "type": "FAMILY",
            "basePremium": "100.00",
            "validFrom": "2025-01-01",
            "benefits": [{"serviceType": "GENERAL_MEDICAL", "coverageLimit": "5000.00"}],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestPolicyProductEndpoints:
    def test_product_lifecycle_and_quote(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        member = create_member(client, admin_headers, company["id"])
        product = create_product(client, admin_headers, company["id"])
        assert product["status"] == "DRAFT"
        url = f"{API}/policy-products/{product['id']}"

        draft_quote = client.post(
            f"{url}/quote", json={"memberId": member["id"]}, headers=admin_headers
        )
        assert draft_quote.status_code == 400

        activated = client.patch(
            f"{url}/status", json={"status": "ACTIVE"}, headers=admin_headers
        )
        assert activated.status_code == 200, activated.text

        frozen = client.patch(url, json={"name": "Renamed"}, headers=admin_headers)
        assert frozen.status_code == 409

        quote = client.post(
            f"{url}/quote",
            json={"memberId": member["id"], "quoteDate": "2025-06-15"},
            headers=admin_headers,
        )
        assert quote.status_code == 200, quote.text
        body = quote.json()
        assert body["familySize"] == 1
        assert body["memberPremiums"][0]["age"] == 37
        assert body["totalPremium"] == "100.00"

        listed = client.get(
            f"{API}/policy-products/",
            params={"insuranceCompanyId": company["id"], "availableOn": "2025-06-15"},
            headers=admin_headers,
        )
        assert listed.status_code == 200
        assert listed.json()["total"] == 1

    def test_tenant_guard(
        self, client: TestClient, admin_headers: dict[str, str], security: Security
    ) -> None:
        company = create_company(client, admin_headers)
        product = create_product(client, admin_headers, company["id"])
        outsider = bearer(security, "INSURANCE_ADMIN", uuid4())

        response = client.get(
            f"{API}/policy-products/{product['id']}", headers=outsider
        )
        assert response.status_code == 403


class TestPaymentPlanEndpoints:
    def test_installments_settle_the_invoice(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        invoice = client.post(
            f"{API}/invoices/",
            json={
                "insuranceCompanyId": company["id"],
                "type": "premium",
                "issueDate": "2025-06-01",
                "dueDate": "2025-07-01",
                "subtotal": "300.00",
            },
            headers=admin_headers,
        ).json()

        created = client.post(
            f"{API}/payment-plans/",
            json={
                "invoiceId": invoice["id"],
                "totalInstallments": 3,
                "startDate": "2025-07-01",
                "paymentMethod": "cash",
            },
            headers=admin_headers,
        )
        assert created.status_code == 201, created.text
        plan = created.json()
        assert plan["installmentAmount"] == "100.00"
        assert plan["endDate"] == "2025-09-01"

        paid = client.post(
            f"{API}/payment-plans/{plan['id']}/payments",
            json={"amount": "100.00", "paymentDate": "2025-07-01"},
            headers=admin_headers,
        )
        assert paid.status_code == 200, paid.text
        assert paid.json()["installmentsPaid"] == 1
        assert paid.json()["nextDueDate"] == "2025-08-01"

        balance = client.get(f"{API}/invoices/{invoice['id']}", headers=admin_headers)
        assert balance.json()["amountDue"] == "200.00"

        refused = client.delete(
            f"{API}/payment-plans/{plan['id']}", headers=admin_headers
        )
        assert refused.status_code == 409

        overdue = client.post(
            f"{API}/payment-plans/check-overdue",
            params={"insuranceCompanyId": company["id"], "asOf": "2025-12-31"},
            headers=admin_headers,
        )
        assert overdue.status_code == 200, overdue.text
        assert [p["status"] for p in overdue.json()] == ["defaulted"]


class TestFraudDetectionEndpoints:
    def test_rule_management(
        self, client: TestClient, admin_headers: dict[str, str], security: Security
    ) -> None:
        company = create_company(client, admin_headers)
        staff = bearer(security, "INSURANCE_ADMIN", company["id"])
        rule = {
            "code": "XRAY-LIMIT",
            "name": "X-ray limit",
            "description": "More than one x-ray a month",
            "type": "FREQUENCY",
            "severity": "HIGH",
            "configuration": {"maxOccurrences": 1, "procedureCodes": ["XRAY"]},
        }

        system_wide = client.post(
            f"{API}/fraud-detection/rules", json=rule, headers=staff
        )
        assert system_wide.status_code == 403

        created = client.post(
            f"{API}/fraud-detection/rules",
            json={**rule, "insuranceCompanyId": company["id"]},
            headers=staff,
        )
        assert created.status_code == 201, created.text

        bad_config = client.post(
            f"{API}/fraud-detection/rules",
            json={**rule, "code": "BROKEN", "configuration": {"windowDays": 1}},
            headers=admin_headers,
        )
        assert bad_config.status_code == 422

        deactivated = client.post(
            f"{API}/fraud-detection/rules/{created.json()['id']}/deactivate",
            headers=staff,
        )
        assert deactivated.status_code == 200
        assert deactivated.json()["status"] == "INACTIVE"

        listed = client.get(
            f"{API}/fraud-detection/rules",
            params={"insuranceCompanyId": company["id"]},
            headers=staff,
        )
        assert listed.json()["total"] == 1

    def test_analysis_and_statistics(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        company = create_company(client, admin_headers)
        params = {"insuranceCompanyId": company["id"]}

        unknown = client.post(
            f"{API}/fraud-detection/analyze/claims/{uuid4()}",
            params=params,
            headers=admin_headers,
        )
        assert unknown.status_code == 404

        stats = client.get(
            f"{API}/fraud-detection/statistics", params=params, headers=admin_headers
        )
        assert stats.status_code == 200
        assert stats.json()["totalAlerts"] == 0
        assert stats.json()["byStatus"]["NEW"] == 0
