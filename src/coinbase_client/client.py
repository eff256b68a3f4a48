"""
Coinbase v1 API client.

CoinbaseClient dispatches typed requests through an authenticating transport
and exposes the v1 resources as async methods. List endpoints come in three
forms:

- ``*_pages()`` returns a PageCursor for walking pages manually
- the plural name (``transfers()``) returns a lazy RecordCollection
- ``get_*()`` loads every record with a large page size
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .auth.tokens import TokenStore
from .models.base import RecordsPage, RequestResponse
from .models.requests import (
    CreateAccountRequest,
    CreateApplicationRequest,
    CreateUserRequest,
    RequestModel,
    UpdateAccountRequest,
    UpdateUserRequest,
)
from .models.responses import (
    Account,
    AccountsPage,
    Address,
    AddressesPage,
    Application,
    ApplicationRecord,
    ApplicationsPage,
    Contact,
    ContactsPage,
    CreateAccountResponse,
    CreateApplicationResponse,
    CreateUserResponse,
    PaymentMethodsResponse,
    Transaction,
    TransactionRecord,
    TransactionsPage,
    Transfer,
    TransfersPage,
    UpdateAccountResponse,
    UpdateUserResponse,
    User,
    UsersResponse,
)
from .pagination import PageCursor, PageList, RecordCollection
from .runtime.errors import ClientClosedError, DecodingError, error_for_status
from .runtime.query import QueryParameters, with_query
from .runtime.units import BitcoinAmount
from .transport.auth import AuthenticatingTransport
from .transport.http import AiohttpTransport, HttpRequest, Send


logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P", bound=RecordsPage)
R = TypeVar("R")

DEFAULT_BASE_URL = "https://coinbase.com/api/v1/"
LIST_PAGE_SIZE = 25
BULK_PAGE_SIZE = 1000


@dataclass
class ClientConfig:
    """Configuration for the Coinbase API client."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    refresh_margin: float = 60.0
    user_agent: str = "coinbase-client-python/0.1.0"
    debug: bool = False

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.refresh_margin < 0:
            raise ValueError("refresh_margin must not be negative")
        if not self.base_url.endswith("/"):
            raise ValueError("base_url must end with '/'")

    @classmethod
    def from_env(cls, prefix: str = "COINBASE_", environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
        """
        Build a configuration from environment variables.

        Recognized variables (with the default prefix): COINBASE_BASE_URL,
        COINBASE_TIMEOUT, COINBASE_REFRESH_MARGIN, COINBASE_USER_AGENT and
        COINBASE_DEBUG. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if f"{prefix}BASE_URL" in env:
            overrides["base_url"] = env[f"{prefix}BASE_URL"]
        if f"{prefix}TIMEOUT" in env:
            overrides["timeout"] = float(env[f"{prefix}TIMEOUT"])
        if f"{prefix}REFRESH_MARGIN" in env:
            overrides["refresh_margin"] = float(env[f"{prefix}REFRESH_MARGIN"])
        if f"{prefix}USER_AGENT" in env:
            overrides["user_agent"] = env[f"{prefix}USER_AGENT"]
        if f"{prefix}DEBUG" in env:
            overrides["debug"] = env[f"{prefix}DEBUG"].strip().lower() in ("1", "true", "yes", "on")

        return cls(**overrides)


class CoinbaseClient:
    """
    Async client for the Coinbase v1 REST API.

    Example:
        ```python
        store = TemporaryTokenStore(client_id, client_secret, access, refresh, expires_at)
        async with CoinbaseClient(store) as client:
            balance = await client.get_balance()
            async for transfer in client.transfers():
                print(transfer.code, transfer.status)
        ```
    """

    def __init__(
        self,
        token_store: TokenStore,
        config: Optional[ClientConfig] = None,
        transport: Optional[Send] = None,
    ):
        """
        Initialize the client.

        Args:
            token_store: Source of OAuth tokens
            config: Client configuration
            transport: Optional underlying transport; an aiohttp transport is
                created otherwise. It is wrapped for authentication either way.
        """
        self.config = config or ClientConfig()
        self.token_store = token_store

        if self.config.debug:
            logging.getLogger("coinbase_client").setLevel(logging.DEBUG)

        self._owns_transport = transport is None
        self._send = transport or AiohttpTransport(timeout=self.config.timeout)
        self.transport = AuthenticatingTransport(
            self._send,
            token_store,
            refresh_margin=self.config.refresh_margin,
        )
        self._adapters: Dict[Any, TypeAdapter] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _adapter(self, response_type: Type[T]) -> TypeAdapter:
        adapter = self._adapters.get(response_type)
        if adapter is None:
            adapter = TypeAdapter(response_type)
            self._adapters[response_type] = adapter
        return adapter

    def _decode(self, endpoint: str, text: str, response_type: Type[T]) -> T:
        try:
            return self._adapter(response_type).validate_json(text)
        except PydanticValidationError as e:
            raise DecodingError(
                f"Response is not a valid {getattr(response_type, '__name__', response_type)}",
                endpoint=endpoint,
                cause=e,
            ) from e

    async def request(
        self,
        method: str,
        endpoint: str,
        response_type: Type[T],
        parameters: Optional[Mapping[str, str]] = None,
        body: Optional[RequestModel] = None,
    ) -> T:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            endpoint: Endpoint relative to the API root
            response_type: Type the JSON body is decoded into
            parameters: Query parameters
            body: Request body, validated before sending

        Returns:
            The decoded response

        Raises:
            ClientClosedError: If the client has been closed
            ValidationError: If the body fails validation; nothing is sent
            ResourceNotFoundError: On 404
            HttpError: On any other non-2xx status
            DecodingError: If the response does not match response_type
        """
        if self._closed:
            raise ClientClosedError()

        payload = body.to_json() if body is not None else None

        url = self.config.base_url + endpoint
        if parameters:
            url = with_query(url, parameters)

        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if payload is not None:
            headers["Content-Type"] = "application/json"

        response = await self.transport(HttpRequest(method, url, body=payload, headers=headers))
        logger.debug(f"{method} {endpoint} -> {response.status}")

        error = error_for_status(response.status, endpoint, response.reason)
        if error is not None:
            raise error

        return self._decode(endpoint, response.text, response_type)

    async def get(self, endpoint: str, response_type: Type[T],
                  parameters: Optional[Mapping[str, str]] = None) -> T:
        return await self.request("GET", endpoint, response_type, parameters)

    async def post(self, endpoint: str, response_type: Type[T],
                   parameters: Optional[Mapping[str, str]] = None,
                   body: Optional[RequestModel] = None) -> T:
        return await self.request("POST", endpoint, response_type, parameters, body)

    async def put(self, endpoint: str, response_type: Type[T],
                  parameters: Optional[Mapping[str, str]] = None,
                  body: Optional[RequestModel] = None) -> T:
        return await self.request("PUT", endpoint, response_type, parameters, body)

    async def delete(self, endpoint: str, response_type: Type[T],
                     parameters: Optional[Mapping[str, str]] = None) -> T:
        return await self.request("DELETE", endpoint, response_type, parameters)

    # =========================================================================
    # Pagination
    # =========================================================================

    def begin_pages(
        self,
        endpoint: str,
        page_type: Type[P],
        page_size: Optional[int] = None,
        parameters: Optional[QueryParameters] = None,
    ) -> PageCursor[P]:
        """Cursor before the first page of a list endpoint. Performs no I/O."""

        async def fetch(page_endpoint: str, page_parameters: QueryParameters) -> P:
            return await self.get(page_endpoint, page_type, page_parameters)

        return PageCursor.begin(fetch, endpoint, page_size, parameters)

    def page_list(
        self,
        endpoint: str,
        page_type: Type[P],
        page_size: Optional[int] = None,
        parameters: Optional[QueryParameters] = None,
    ) -> PageList[P]:
        return PageList(self.begin_pages(endpoint, page_type, page_size, parameters))

    def records(
        self,
        endpoint: str,
        page_type: Type[P],
        projection: Callable[[P], Sequence[R]],
        page_size: Optional[int] = None,
        parameters: Optional[QueryParameters] = None,
    ) -> RecordCollection[P, R]:
        return RecordCollection(self.page_list(endpoint, page_type, page_size, parameters), projection)

    async def _get_all(
        self,
        endpoint: str,
        page_type: Type[P],
        projection: Callable[[P], Sequence[R]],
        page_size: Optional[int],
        parameters: Optional[QueryParameters] = None,
    ) -> List[R]:
        cursor = self.begin_pages(endpoint, page_type, page_size, parameters)
        records: List[R] = []
        for page in await cursor.get_remaining_responses():
            records.extend(projection(page))
        return records

    # =========================================================================
    # Users
    # =========================================================================

    async def get_user(self) -> User:
        """
        Get the user the access token belongs to.

        Raises:
            DecodingError: If the response does not hold exactly one user
        """
        response = await self.get("users", UsersResponse)
        if len(response.users) != 1:
            raise DecodingError(
                f"Expected exactly one user, got {len(response.users)}",
                endpoint="users",
            )
        return response.users[0].user

    async def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        return await self.post("users", CreateUserResponse, body=request)

    async def update_user(self, request: UpdateUserRequest,
                          user_id: Optional[str] = None) -> UpdateUserResponse:
        """Update a user; defaults to the current user."""
        if user_id is None:
            user_id = (await self.get_user()).id
        return await self.put(f"users/{user_id}", UpdateUserResponse, body=request)

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_balance(self) -> BitcoinAmount:
        """Balance of the primary account."""
        return await self.get("account/balance", BitcoinAmount)

    def account_pages(self, per_page: Optional[int] = None) -> PageCursor[AccountsPage]:
        return self.begin_pages("accounts", AccountsPage, per_page)

    def accounts(self, per_page: Optional[int] = None) -> RecordCollection[AccountsPage, Account]:
        return self.records("accounts", AccountsPage, _accounts, per_page)

    async def get_accounts(self, per_page: int = BULK_PAGE_SIZE) -> List[Account]:
        return await self._get_all("accounts", AccountsPage, _accounts, per_page)

    async def get_account_balance(self, account_id: str) -> BitcoinAmount:
        return await self.get(f"accounts/{account_id}/balance", BitcoinAmount)

    async def create_account(self, request: Optional[CreateAccountRequest] = None) -> CreateAccountResponse:
        return await self.post("accounts", CreateAccountResponse, body=request)

    async def set_primary_account(self, account_id: str) -> RequestResponse:
        return await self.post(f"accounts/{account_id}/primary", RequestResponse)

    async def update_account(self, account_id: str, request: UpdateAccountRequest) -> UpdateAccountResponse:
        return await self.put(f"accounts/{account_id}", UpdateAccountResponse, body=request)

    async def destroy_account(self, account_id: str) -> RequestResponse:
        return await self.delete(f"accounts/{account_id}", RequestResponse)

    # =========================================================================
    # Transactions
    # =========================================================================

    def transaction_pages(self, account_id: Optional[str] = None,
                          per_page: int = LIST_PAGE_SIZE) -> PageCursor[TransactionsPage]:
        return self.begin_pages("transactions", TransactionsPage, per_page, _filters(account_id))

    def transactions(self, account_id: Optional[str] = None,
                     per_page: int = LIST_PAGE_SIZE) -> RecordCollection[TransactionsPage, Transaction]:
        return self.records("transactions", TransactionsPage, _transactions, per_page, _filters(account_id))

    async def get_transactions(self, account_id: Optional[str] = None,
                               per_page: int = BULK_PAGE_SIZE) -> List[Transaction]:
        return await self._get_all("transactions", TransactionsPage, _transactions, per_page,
                                   _filters(account_id))

    async def get_transaction(self, transaction_id: str, account_id: Optional[str] = None) -> Transaction:
        record = await self.get(f"transactions/{transaction_id}", TransactionRecord, _filters(account_id))
        return record.transaction

    # =========================================================================
    # Transfers
    # =========================================================================

    def transfer_pages(self, account_id: Optional[str] = None,
                       per_page: int = LIST_PAGE_SIZE) -> PageCursor[TransfersPage]:
        return self.begin_pages("transfers", TransfersPage, per_page, _filters(account_id))

    def transfers(self, account_id: Optional[str] = None,
                  per_page: int = LIST_PAGE_SIZE) -> RecordCollection[TransfersPage, Transfer]:
        return self.records("transfers", TransfersPage, _transfers, per_page, _filters(account_id))

    async def get_transfers(self, account_id: Optional[str] = None,
                            per_page: int = BULK_PAGE_SIZE) -> List[Transfer]:
        return await self._get_all("transfers", TransfersPage, _transfers, per_page, _filters(account_id))

    # =========================================================================
    # Addresses
    # =========================================================================

    def address_pages(self, account_id: Optional[str] = None, query: Optional[str] = None,
                      per_page: int = LIST_PAGE_SIZE) -> PageCursor[AddressesPage]:
        return self.begin_pages("addresses", AddressesPage, per_page, _filters(account_id, query))

    def addresses(self, account_id: Optional[str] = None, query: Optional[str] = None,
                  per_page: int = LIST_PAGE_SIZE) -> RecordCollection[AddressesPage, Address]:
        return self.records("addresses", AddressesPage, _addresses, per_page, _filters(account_id, query))

    async def get_addresses(self, account_id: Optional[str] = None, query: Optional[str] = None,
                            per_page: int = BULK_PAGE_SIZE) -> List[Address]:
        return await self._get_all("addresses", AddressesPage, _addresses, per_page,
                                   _filters(account_id, query))

    # =========================================================================
    # OAuth applications
    # =========================================================================

    def application_pages(self, per_page: int = LIST_PAGE_SIZE) -> PageCursor[ApplicationsPage]:
        return self.begin_pages("oauth/applications", ApplicationsPage, per_page)

    def applications(self, per_page: int = LIST_PAGE_SIZE) -> RecordCollection[ApplicationsPage, Application]:
        return self.records("oauth/applications", ApplicationsPage, _applications, per_page)

    async def get_applications(self, per_page: int = BULK_PAGE_SIZE) -> List[Application]:
        return await self._get_all("oauth/applications", ApplicationsPage, _applications, per_page)

    async def get_application(self, application_id: str) -> Application:
        record = await self.get(f"oauth/applications/{application_id}", ApplicationRecord)
        return record.application

    async def create_application(self, request: CreateApplicationRequest) -> CreateApplicationResponse:
        return await self.post("oauth/applications", CreateApplicationResponse, body=request)

    # =========================================================================
    # Contacts and payment methods
    # =========================================================================

    def contact_pages(self, query: Optional[str] = None,
                      per_page: int = LIST_PAGE_SIZE) -> PageCursor[ContactsPage]:
        return self.begin_pages("contacts", ContactsPage, per_page, _filters(query=query))

    def contacts(self, query: Optional[str] = None,
                 per_page: int = LIST_PAGE_SIZE) -> RecordCollection[ContactsPage, Contact]:
        return self.records("contacts", ContactsPage, _contacts, per_page, _filters(query=query))

    async def get_contacts(self, query: Optional[str] = None,
                           per_page: int = BULK_PAGE_SIZE) -> List[Contact]:
        return await self._get_all("contacts", ContactsPage, _contacts, per_page, _filters(query=query))

    async def get_payment_methods(self) -> PaymentMethodsResponse:
        return await self.get("payment_methods", PaymentMethodsResponse)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close the client and the transport it created."""
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self) -> CoinbaseClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _filters(account_id: Optional[str] = None, query: Optional[str] = None) -> QueryParameters:
    parameters = QueryParameters()
    parameters.set_account_id(account_id)
    parameters.set_query(query)
    return parameters


def _accounts(page: AccountsPage) -> List[Account]:
    return page.accounts


def _transactions(page: TransactionsPage) -> List[Transaction]:
    return [record.transaction for record in page.transactions]


def _transfers(page: TransfersPage) -> List[Transfer]:
    return [record.transfer for record in page.transfers]


def _addresses(page: AddressesPage) -> List[Address]:
    return [record.address for record in page.addresses]


def _applications(page: ApplicationsPage) -> List[Application]:
    return page.applications


def _contacts(page: ContactsPage) -> List[Contact]:
    return [record.contact for record in page.contacts]


__all__ = ["ClientConfig", "CoinbaseClient", "DEFAULT_BASE_URL"]
