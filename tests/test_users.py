"""Tests for user registration, profile access and admin listing."""

import pytest
from httpx import AsyncClient

from conftest import PASSWORD


@pytest.mark.asyncio
async def test_register_duplicate_name_or_email(async_client: AsyncClient, customer):
    resp = await async_client.post(
        "/api/users",
        json={"name": customer.name, "email": "fresh@example.com", "password": "pw123456"},
    )
    assert resp.status_code == 409

    resp = await async_client.post(
        "/api/users",
        json={"name": "fresh", "email": customer.email, "password": "pw123456"},
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_requires_fields(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/users", json={"name": "  ", "email": "x@example.com", "password": "pw"}
    )
    assert resp.status_code == 400

    resp = await async_client.post("/api/users", json={"name": "x"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_self(async_client: AsyncClient, customer, customer_headers):
    resp = await async_client.get(f"/api/users/{customer.id}", headers=customer_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == customer.name
    assert "hashed_password" not in resp.json()


@pytest.mark.asyncio
async def test_get_other_user_is_forbidden(async_client: AsyncClient, other_customer, customer_headers):
    resp = await async_client.get(f"/api/users/{other_customer.id}", headers=customer_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_get_user_anonymous(async_client: AsyncClient, customer):
    resp = await async_client.get(f"/api/users/{customer.id}")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_gets_any_user(async_client: AsyncClient, customer, admin_headers):
    resp = await async_client.get(f"/api/users/{customer.id}", headers=admin_headers)
    assert resp.status_code == 200

    resp = await async_client.get("/api/users/9999", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_edit_self(async_client: AsyncClient, customer, customer_headers):
    resp = await async_client.patch(
        f"/api/users/{customer.id}",
        json={"name": "alice2", "email": "alice2@example.com", "password": "newpass123"},
        headers=customer_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "alice2"

    resp = await async_client.post("/api/token", json={"username": "alice2", "password": "newpass123"})
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_edit_keeps_password_when_omitted(async_client: AsyncClient, customer, customer_headers):
    resp = await async_client.patch(
        f"/api/users/{customer.id}",
        json={"name": customer.name, "email": "alice-new@example.com"},
        headers=customer_headers,
    )
    assert resp.status_code == 200

    resp = await async_client.post("/api/token", json={"username": customer.name, "password": PASSWORD})
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_edit_other_user_is_forbidden(async_client: AsyncClient, other_customer, customer_headers):
    resp = await async_client.patch(
        f"/api/users/{other_customer.id}",
        json={"name": "hijack", "email": "hijack@example.com"},
        headers=customer_headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_edit_to_taken_name_conflicts(
    async_client: AsyncClient, customer, other_customer, customer_headers
):
    resp = await async_client.patch(
        f"/api/users/{customer.id}",
        json={"name": other_customer.name, "email": customer.email},
        headers=customer_headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_list_users_is_admin_only(async_client: AsyncClient, customer_headers, chef_headers):
    assert (await async_client.get("/api/users", headers=customer_headers)).status_code == 403
    assert (await async_client.get("/api/users", headers=chef_headers)).status_code == 403


@pytest.mark.asyncio
async def test_list_users_role_filter_is_bitwise(
    async_client: AsyncClient, customer, chef, admin, admin_headers
):
    resp = await async_client.get("/api/users", params={"role": 2}, headers=admin_headers)
    assert resp.status_code == 200
    names = {u["name"] for u in resp.json()}
    assert names == {chef.name, admin.name}


@pytest.mark.asyncio
async def test_list_users_search_and_paging(async_client: AsyncClient, customer, other_customer, admin_headers):
    resp = await async_client.get("/api/users", params={"search": "ali"}, headers=admin_headers)
    assert [u["name"] for u in resp.json()] == [customer.name]

    resp = await async_client.get("/api/users", params={"limit": 21}, headers=admin_headers)
    assert resp.status_code == 400

    resp = await async_client.get("/api/users", params={"offset": -1}, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_users_search_wildcard_is_literal(
    async_client: AsyncClient, customer, other_customer, make_user, admin_headers
):
    snake = await make_user("snake_case")
    resp = await async_client.get("/api/users", params={"search": "_"}, headers=admin_headers)
    assert [u["name"] for u in resp.json()] == [snake.name]
