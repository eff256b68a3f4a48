"""
Coinbase v1 response entities.

Each paginated endpoint has a page model (RecordsPage plus a list named after
the resource) and, where the API wraps each record in a single-key object
(e.g. {"transaction": {...}}), a record model mirroring that wrapper.

Reference: https://coinbase.com/api/doc/1.0/
"""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from ..runtime.units import BitcoinAmount
from .base import CoinbaseModel, NativeCurrency, RecordsPage, RequestResponse, ShortUser


# =============================================================================
# Users
# =============================================================================

class User(ShortUser):
    """The authenticated user's profile."""
    time_zone: Optional[str] = None
    native_currency: Optional[str] = None
    balance: Optional[BitcoinAmount] = None
    buy_level: Optional[int] = None
    sell_level: Optional[int] = None
    buy_limit: Optional[BitcoinAmount] = None
    sell_limit: Optional[BitcoinAmount] = None


class UserRecord(CoinbaseModel):
    user: User


class UsersResponse(CoinbaseModel):
    users: List[UserRecord] = Field(default_factory=list)


class CreatedUser(ShortUser):
    receive_address: Optional[str] = None


class CreateUserResponse(RequestResponse):
    user: Optional[CreatedUser] = None


class UpdateUserResponse(RequestResponse):
    user: Optional[User] = None


# =============================================================================
# Accounts
# =============================================================================

class Account(CoinbaseModel):
    """
    A wallet account.

    Reference: https://coinbase.com/api/doc/1.0/accounts.html
    """
    id: str
    name: Optional[str] = None
    balance: Optional[BitcoinAmount] = None
    native_balance: Optional[NativeCurrency] = None
    created_at: Optional[datetime] = None
    primary: bool = False
    active: bool = False


class AccountsPage(RecordsPage):
    accounts: List[Account] = Field(default_factory=list)


class CreateAccountResponse(RequestResponse):
    account: Optional[Account] = None


class UpdateAccountResponse(RequestResponse):
    account: Optional[Account] = None


# =============================================================================
# Transactions
# =============================================================================

class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"


class Transaction(CoinbaseModel):
    id: str
    created_at: Optional[datetime] = None
    hsh: Optional[str] = None
    amount: Optional[BitcoinAmount] = None
    request: bool = False
    status: Optional[TransactionStatus] = None
    sender: Optional[ShortUser] = None
    recipient: Optional[ShortUser] = None
    recipient_address: Optional[str] = None


class TransactionRecord(CoinbaseModel):
    transaction: Transaction


class TransactionsPage(RecordsPage):
    """
    A page of transactions.

    Reference: https://coinbase.com/api/doc/1.0/transactions/index.html
    """
    current_user: Optional[ShortUser] = None
    balance: Optional[BitcoinAmount] = None
    native_balance: Optional[NativeCurrency] = None
    transactions: List[TransactionRecord] = Field(default_factory=list)


# =============================================================================
# Transfers
# =============================================================================

class TransferType(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class TransferStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELED = "Canceled"
    REVERSED = "Reversed"


class Fee(CoinbaseModel):
    cents: int
    currency_iso: str


class Fees(CoinbaseModel):
    coinbase: Optional[Fee] = None
    bank: Optional[Fee] = None


class Transfer(CoinbaseModel):
    type: TransferType
    code: Optional[str] = None
    created_at: Optional[datetime] = None
    fees: Optional[Fees] = None
    payout_date: Optional[datetime] = None
    transaction_id: Optional[str] = None
    status: TransferStatus
    btc: Optional[BitcoinAmount] = None
    subtotal: Optional[NativeCurrency] = None
    total: Optional[NativeCurrency] = None
    description: Optional[str] = None


class TransferRecord(CoinbaseModel):
    transfer: Transfer


class TransfersPage(RecordsPage):
    """
    A page of buy/sell transfers.

    Reference: https://coinbase.com/api/doc/1.0/transfers/index.html
    """
    transfers: List[TransferRecord] = Field(default_factory=list)


# =============================================================================
# Addresses
# =============================================================================

class Address(CoinbaseModel):
    address: str
    callback_url: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[datetime] = None


class AddressRecord(CoinbaseModel):
    address: Address


class AddressesPage(RecordsPage):
    addresses: List[AddressRecord] = Field(default_factory=list)


# =============================================================================
# OAuth applications
# =============================================================================

class Application(CoinbaseModel):
    id: str
    created_at: Optional[datetime] = None
    name: Optional[str] = None
    redirect_uri: Optional[str] = None
    num_users: int = 0


class ApplicationRecord(CoinbaseModel):
    application: Application


class ApplicationsPage(RecordsPage):
    applications: List[Application] = Field(default_factory=list)


class CreateApplicationResponse(RequestResponse):
    application: Optional[Application] = None


# =============================================================================
# Contacts
# =============================================================================

class Contact(CoinbaseModel):
    email: str


class ContactRecord(CoinbaseModel):
    contact: Contact


class ContactsPage(RecordsPage):
    contacts: List[ContactRecord] = Field(default_factory=list)


# =============================================================================
# Payment methods
# =============================================================================

class PaymentMethod(CoinbaseModel):
    id: str
    name: Optional[str] = None
    can_buy: bool = False
    can_sell: bool = False


class PaymentMethodRecord(CoinbaseModel):
    payment_method: PaymentMethod


class PaymentMethodsResponse(CoinbaseModel):
    payment_methods: List[PaymentMethodRecord] = Field(default_factory=list)
    default_buy: Optional[str] = None
    default_sell: Optional[str] = None


__all__ = [
    "User",
    "UserRecord",
    "UsersResponse",
    "CreatedUser",
    "CreateUserResponse",
    "UpdateUserResponse",
    "Account",
    "AccountsPage",
    "CreateAccountResponse",
    "UpdateAccountResponse",
    "TransactionStatus",
    "Transaction",
    "TransactionRecord",
    "TransactionsPage",
    "TransferType",
    "TransferStatus",
    "Fee",
    "Fees",
    "Transfer",
    "TransferRecord",
    "TransfersPage",
    "Address",
    "AddressRecord",
    "AddressesPage",
    "Application",
    "ApplicationRecord",
    "ApplicationsPage",
    "CreateApplicationResponse",
    "Contact",
    "ContactRecord",
    "ContactsPage",
    "PaymentMethod",
    "PaymentMethodRecord",
    "PaymentMethodsResponse",
]
