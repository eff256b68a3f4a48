"""
Tests for CoinbaseClient dispatch, error mapping and resource methods.
"""

import json
import logging
import pytest
from decimal import Decimal

from helpers import (
    MockTokenStore, PagedEndpoint, mk_client, query_of,
    unauthorized_until_token,
)

from coinbase_client import CoinbaseClient, ClientConfig
from coinbase_client.models import (
    AccountsPage, CreateAccountRequest, CreateApplicationRequest, ApplicationDetails,
    RequestResponse, UpdateAccountRequest, UpdateUserRequest, UserChanges,
)
from coinbase_client.runtime.errors import (
    ClientClosedError, DecodingError, ErrorCode, HttpError, ResourceNotFoundError, ValidationError,
)
from coinbase_client.runtime.units import BitcoinAmount


USER = {"id": "512db383f8182bd24d000001", "name": "User One", "email": "user1@example.com"}


def account(i):
    return {"id": f"acct-{i}", "name": f"Wallet {i}", "balance": {"amount": "1.00000000", "currency": "BTC"}}


class TestDispatch:
    """Test request construction and response decoding."""

    @pytest.mark.asyncio
    async def test_get_builds_url_and_headers(self, client, transport):
        transport.set_response("GET", "accounts", {"accounts": [], "total_count": 0,
                                                   "num_pages": 0, "current_page": 1})

        page = await client.get("accounts", AccountsPage, {"page": "1"})

        request = transport.requests[0]
        assert request.url.startswith("https://coinbase.com/api/v1/accounts?")
        assert query_of(request) == {"page": "1", "access_token": "token-0"}
        assert request.headers["Accept"] == "application/json"
        assert "Content-Type" not in request.headers
        assert request.body is None
        assert page.total_count == 0

    @pytest.mark.asyncio
    async def test_post_serializes_body(self, client, transport):
        transport.set_response("POST", "accounts", {"success": True, "account": account(1)})

        response = await client.create_account(CreateAccountRequest.named("Savings"))

        request = transport.requests[0]
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.body) == {"account": {"name": "Savings"}}
        assert response.success
        assert response.account.id == "acct-1"

    @pytest.mark.asyncio
    async def test_invalid_body_not_sent(self, client, transport):
        request = CreateApplicationRequest.model_construct(
            application=ApplicationDetails.model_construct(name="App", redirect_uri="")
        )

        with pytest.raises(ValidationError):
            await client.create_application(request)

        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_404_maps_to_resource_not_found(self, client, transport):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await client.get_transaction("missing")

        assert exc_info.value.endpoint == "transactions/missing"
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_other_status_maps_to_http_error(self, client, transport):
        transport.set_response("GET", "payment_methods", {"error": "down"}, status=503, reason="Unavailable")

        with pytest.raises(HttpError) as exc_info:
            await client.get_payment_methods()

        assert exc_info.value.status == 503
        assert exc_info.value.reason == "Unavailable"

    @pytest.mark.asyncio
    async def test_persistent_401_is_http_error(self, transport):
        transport.set_response("GET", "payment_methods", {}, status=401)
        store = MockTokenStore("revoked")
        client = mk_client(transport, store)

        with pytest.raises(HttpError) as exc_info:
            await client.get_payment_methods()

        assert exc_info.value.status == 401
        assert store.refresh_count == 1
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_reactive_refresh_is_transparent(self, transport):
        transport.set_handler("GET", "payment_methods",
                              unauthorized_until_token("token-1", {"payment_methods": []}))
        client = mk_client(transport, MockTokenStore("revoked"))

        response = await client.get_payment_methods()

        assert response.payment_methods == []

    @pytest.mark.asyncio
    async def test_malformed_json(self, client, transport):
        transport.set_response("GET", "payment_methods", "<html>oops</html>")

        with pytest.raises(DecodingError) as exc_info:
            await client.get_payment_methods()

        assert exc_info.value.endpoint == "payment_methods"

    @pytest.mark.asyncio
    async def test_wrong_shape(self, client, transport):
        transport.set_response("GET", "accounts", {"accounts": []})

        with pytest.raises(DecodingError):
            await client.get("accounts", AccountsPage)


class TestUsers:

    @pytest.mark.asyncio
    async def test_get_user(self, client, transport):
        transport.set_response("GET", "users", {"users": [{"user": USER}]})

        user = await client.get_user()

        assert user.name == "User One"

    @pytest.mark.asyncio
    async def test_get_user_requires_exactly_one(self, client, transport):
        transport.set_response("GET", "users", {"users": [{"user": USER}, {"user": USER}]})

        with pytest.raises(DecodingError):
            await client.get_user()

    @pytest.mark.asyncio
    async def test_update_current_user(self, client, transport):
        transport.set_response("GET", "users", {"users": [{"user": USER}]})
        transport.set_response("PUT", f"users/{USER['id']}", {"success": True, "user": USER})

        response = await client.update_user(UpdateUserRequest(user=UserChanges(name="Renamed")))

        assert response.success
        assert [r.method for r in transport.requests] == ["GET", "PUT"]
        assert json.loads(transport.requests[1].body) == {"user": {"name": "Renamed"}}

    @pytest.mark.asyncio
    async def test_update_user_by_id(self, client, transport):
        transport.set_response("PUT", "users/abc", {"success": True})

        await client.update_user(UpdateUserRequest(user=UserChanges(pin="1234")), user_id="abc")

        assert transport.call_count == 1


class TestAccounts:

    @pytest.mark.asyncio
    async def test_get_balance(self, client, transport):
        transport.set_response("GET", "account/balance", {"amount": "36.62800000", "currency": "BTC"})

        balance = await client.get_balance()

        assert isinstance(balance, BitcoinAmount)
        assert balance.value == Decimal("36.628")

    @pytest.mark.asyncio
    async def test_usd_balance_rejected(self, client, transport):
        transport.set_response("GET", "accounts/a1/balance", {"amount": "36.62", "currency": "USD"})

        with pytest.raises(DecodingError):
            await client.get_account_balance("a1")

    @pytest.mark.asyncio
    async def test_get_accounts_uses_bulk_page_size(self, client, transport):
        endpoint = PagedEndpoint("accounts", [account(i) for i in range(5)])
        transport.set_handler("GET", "accounts", endpoint)

        accounts = await client.get_accounts()

        assert [a.id for a in accounts] == [f"acct-{i}" for i in range(5)]
        assert query_of(transport.requests[0])["limit"] == "1000"

    @pytest.mark.asyncio
    async def test_accounts_collection(self, client, transport):
        transport.set_handler("GET", "accounts", PagedEndpoint("accounts", [account(i) for i in range(5)]))

        accounts = client.accounts(per_page=2)

        assert await accounts.count() == 5
        assert (await accounts.item_at(3)).id == "acct-3"

    @pytest.mark.asyncio
    async def test_account_mutations(self, client, transport):
        transport.set_response("POST", "accounts/a1/primary", {"success": True})
        transport.set_response("DELETE", "accounts/a1", {"success": True})
        transport.set_response("PUT", "accounts/a1", {"success": True, "account": account(1)})

        assert (await client.set_primary_account("a1")).success
        assert isinstance(await client.destroy_account("a1"), RequestResponse)
        updated = await client.update_account("a1", UpdateAccountRequest.named("x"))

        assert updated.account.name == "Wallet 1"
        assert [r.method for r in transport.requests] == ["POST", "DELETE", "PUT"]


class TestListEndpoints:

    @pytest.mark.asyncio
    async def test_transfers_filtered_by_account(self, client, transport):
        transfer = {"type": "Sell", "status": "Completed", "code": "X"}
        endpoint = PagedEndpoint("transfers", [{"transfer": transfer}] * 3)
        transport.set_handler("GET", "transfers", endpoint)

        transfers = await client.get_transfers(account_id="a1")

        assert len(transfers) == 3
        assert all(query_of(r)["account_id"] == "a1" for r in transport.requests)

    @pytest.mark.asyncio
    async def test_transaction_pages(self, client, transport):
        records = [{"transaction": {"id": f"t{i}"}} for i in range(30)]
        transport.set_handler("GET", "transactions", PagedEndpoint("transactions", records))

        cursor = await client.transaction_pages().get_next_page()

        assert cursor.num_pages == 2
        assert len(cursor.response.transactions) == 25

    @pytest.mark.asyncio
    async def test_addresses_query_filter(self, client, transport):
        records = [{"address": {"address": "moLxGrqWNcnGq4A8Caq8EGP4n9GUGWanj4"}}]
        transport.set_handler("GET", "addresses", PagedEndpoint("addresses", records))

        addresses = await client.addresses(query="moLx").to_flat_list()

        assert addresses[0].address == "moLxGrqWNcnGq4A8Caq8EGP4n9GUGWanj4"
        assert query_of(transport.requests[0])["query"] == "moLx"

    @pytest.mark.asyncio
    async def test_contacts(self, client, transport):
        records = [{"contact": {"email": f"user{i}@example.com"}} for i in range(3)]
        transport.set_handler("GET", "contacts", PagedEndpoint("contacts", records))

        contacts = await client.get_contacts()

        assert [c.email for c in contacts] == [f"user{i}@example.com" for i in range(3)]

    @pytest.mark.asyncio
    async def test_applications(self, client, transport):
        apps = [{"id": f"app{i}", "name": f"App {i}"} for i in range(3)]
        transport.set_handler("GET", "oauth/applications", PagedEndpoint("applications", apps))
        transport.set_response("GET", "oauth/applications/app1", {"application": apps[1]})

        assert [a.id for a in await client.get_applications()] == ["app0", "app1", "app2"]
        assert (await client.get_application("app1")).name == "App 1"


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_closed_client_rejects_requests(self, client, transport):
        await client.close()

        with pytest.raises(ClientClosedError):
            await client.get_payment_methods()
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_supplied_transport_left_open(self, transport, token_store):
        async with CoinbaseClient(token_store, transport=transport) as client:
            assert not client.closed

        assert client.closed
        assert not transport.closed

    def test_debug_sets_package_log_level(self, transport, token_store):
        package_logger = logging.getLogger("coinbase_client")
        previous = package_logger.level
        try:
            CoinbaseClient(token_store, ClientConfig(debug=True), transport=transport)
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)
