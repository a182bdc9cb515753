from conftest import auth_headers


def test_tenant_rent_management_balance(client, finalized_lease, owner_headers, tenant_headers):
    client.post(
        f"/api/leases/{finalized_lease['id']}/generate-monthly-payment?as_of=2024-03-15",
        headers=owner_headers,
    )

    response = client.get(
        f"/api/tenant/rent-management/{finalized_lease['id']}?as_of=2024-03-15",
        headers=tenant_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["lease"]["id"] == finalized_lease["id"]
    assert len(body["payments"]) == 1
    assert body["balance"] == {
        "totalDue": 3500.0,
        "totalPaid": 0.0,
        "balance": 3500.0,
        "monthsDue": 3,
        "totalRentDue": 3000.0,
    }


def test_balance_is_frozen_after_lease_end(client, finalized_lease, tenant_headers):
    url = f"/api/tenant/rent-management/{finalized_lease['id']}"

    at_end = client.get(f"{url}?as_of=2024-12-31", headers=tenant_headers).json()["balance"]
    years_later = client.get(f"{url}?as_of=2027-06-01", headers=tenant_headers).json()["balance"]

    assert at_end["monthsDue"] == 12
    assert years_later == at_end


def test_tenant_rent_management_requires_finalized_lease(client, create_lease, tenant_headers):
    lease = create_lease()

    response = client.get(f"/api/tenant/rent-management/{lease['id']}", headers=tenant_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "lease_not_finalized"


def test_tenant_rent_management_is_private(client, finalized_lease):
    other_tenant = auth_headers("tenant-2", "TENANT")

    response = client.get(f"/api/tenant/rent-management/{finalized_lease['id']}", headers=other_tenant)
    assert response.status_code == 403


def test_landlord_rent_management_lists_finalized_leases(client, finalized_lease, create_lease, owner_headers):
    create_lease()  # still a draft

    response = client.get("/api/landlord/rent-management?as_of=2024-01-20", headers=owner_headers)

    assert response.status_code == 200
    leases = response.json()
    assert [item["lease"]["id"] for item in leases] == [finalized_lease["id"]]
    assert leases[0]["balance"]["monthsDue"] == 1
    assert leases[0]["balance"]["totalDue"] == 1500.0


def test_landlord_rent_management_requires_landlord(client, tenant_headers):
    assert client.get("/api/landlord/rent-management", headers=tenant_headers).status_code == 403


def test_tenant_payments_empty(client, tenant_headers):
    response = client.get("/api/tenant/payments", headers=tenant_headers)

    assert response.status_code == 200
    assert response.json() == []
