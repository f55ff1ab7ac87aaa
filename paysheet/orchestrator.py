"""
Main Orchestrator for Paysheet

This module ties together all the components and defines the
use-case flows behind the HTTP API:
1. Auth (login, self-registration, current identity)
2. Transactions (list, get, create, update, delete)
3. Reports (balance, period reports, summary)
4. User administration (admin only)

DESIGN DECISION: The flows own the business rules that sit above raw
persistence: input validation, the duplicate-email pre-check and the
self-targeting guards. The HTTP layer only translates.

The duplicate-email check is a read followed by an append. Two
concurrent creates with the same email can both pass it; that race is
accepted (see services/storage/keyed_table.py).
"""

from datetime import date
from typing import Any, NamedTuple, Optional

import structlog

from paysheet.audit import AuditLogger
from paysheet.auth import (
    AuthService,
    ForbiddenError,
    UnauthorizedError,
    create_access_token,
    decode_access_token,
    hash_password,
)
from paysheet.config import AuthSettings, Settings, get_settings
from paysheet.models.report import Balance, Report, Summary
from paysheet.models.transaction import Transaction, TransactionType
from paysheet.models.user import Role, TokenUser, User, UserPublic
from paysheet.reports import (
    balance,
    build_report,
    build_summary,
    filter_transactions,
    resolve_period,
)
from paysheet.services.storage import (
    DuplicateError,
    InMemorySheetsClient,
    NotFoundError,
    SheetsClientInterface,
    SheetTransactionStorage,
    SheetUserStorage,
    TransactionStorageInterface,
    UserStorageInterface,
    ensure_tables,
    get_sheets_client,
)
from paysheet.validation import TransactionValidator, UserValidator


logger = structlog.get_logger(__name__)


class AuthFlow:
    """Login, self-registration and token issuing."""

    def __init__(
        self,
        users: UserStorageInterface,
        audit_logger: AuditLogger,
        auth_settings: Optional[AuthSettings] = None,
        registration_enabled: bool = True,
        validator: Optional[UserValidator] = None,
    ):
        self._users = users
        self._auth = AuthService(users)
        self._audit = audit_logger
        self._settings = auth_settings
        self._registration_enabled = registration_enabled
        self._validator = validator or UserValidator()

    def _token(self, user: User) -> str:
        return create_access_token(user, settings=self._settings)

    def login(self, payload: dict[str, Any]) -> tuple[str, UserPublic]:
        """
        Verify credentials and issue a token.

        Raises:
            ValidationFailedError: If email or password is missing
            UnauthorizedError: On unknown email or wrong password
        """
        email, password = self._validator.validate_login(payload)
        try:
            user = self._auth.authenticate(email, password)
        except UnauthorizedError:
            self._audit.login_failed(email=email, reason="invalid_credentials")
            raise

        self._audit.login_succeeded(user_id=user.id, email=user.email)
        return self._token(user), user.to_public()

    def register(self, payload: dict[str, Any]) -> tuple[str, UserPublic]:
        """Create a plain ``user`` account and log it in."""
        if not self._registration_enabled:
            raise ForbiddenError("Registration is disabled")

        cleaned = self._validator.validate_create(payload, allow_role=False)
        if self._users.find_user_by_email(cleaned["email"]) is not None:
            raise DuplicateError("User with this email already exists")

        user = self._users.create_user(User(
            email=cleaned["email"],
            password_hash=hash_password(cleaned["password"]),
            name=cleaned["name"],
            role=Role.USER,
        ))
        self._audit.user_registered(user_id=user.id, email=user.email)
        return self._token(user), user.to_public()

    def identify(self, token: str) -> TokenUser:
        """Identity carried by a bearer token. Raises UnauthorizedError."""
        return decode_access_token(token, settings=self._settings)


class TransactionFlow:
    """CRUD on transactions for any authenticated user."""

    def __init__(
        self,
        storage: TransactionStorageInterface,
        audit_logger: AuditLogger,
        validator: Optional[TransactionValidator] = None,
    ):
        self._storage = storage
        self._audit = audit_logger
        self._validator = validator or TransactionValidator()

    def list(
        self,
        tx_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """Filtered listing, newest first. Unknown type filters are ignored."""
        if tx_type not in {t.value for t in TransactionType}:
            tx_type = None
        return filter_transactions(
            self._storage.list_transactions(),
            tx_type=tx_type,
            start=start_date,
            end=end_date,
            category=category,
        )

    def get(self, transaction_id: str) -> Transaction:
        transaction = self._storage.get_transaction_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        return transaction

    def create(self, payload: dict[str, Any], actor: TokenUser) -> Transaction:
        cleaned = self._validator.validate_create(payload)
        transaction = self._storage.create_transaction(Transaction(
            date=cleaned["date"],
            type=cleaned["type"],
            category=cleaned["category"],
            description=cleaned["description"],
            amount=cleaned["amount"],
            created_by=actor.display_name,
        ))
        self._audit.transaction_created(
            actor_id=actor.id,
            transaction_id=transaction.id,
            tx_type=transaction.type.value,
            amount=str(transaction.amount),
        )
        return transaction

    def update(
        self,
        transaction_id: str,
        payload: dict[str, Any],
        actor: TokenUser,
    ) -> Transaction:
        cleaned = self._validator.validate_update(payload)
        try:
            transaction = self._storage.update_transaction(transaction_id, cleaned)
        except NotFoundError:
            raise NotFoundError("Transaction not found")

        self._audit.transaction_updated(
            actor_id=actor.id,
            transaction_id=transaction_id,
            fields=sorted(cleaned),
        )
        return transaction

    def delete(self, transaction_id: str, actor: TokenUser) -> None:
        try:
            self._storage.delete_transaction(transaction_id)
        except NotFoundError:
            raise NotFoundError("Transaction not found")
        self._audit.transaction_deleted(actor_id=actor.id, transaction_id=transaction_id)


class ReportFlow:
    """Read-only reporting over the full transaction list."""

    def __init__(self, storage: TransactionStorageInterface):
        self._storage = storage

    def balance(self) -> Balance:
        return balance(self._storage.list_transactions())

    def report(
        self,
        period: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Report:
        """
        Report for a preset or custom window.

        Raises:
            InvalidPeriodError: On an unknown period or bad bounds
        """
        resolved = resolve_period(
            period,
            start_date,
            end_date,
            month=month,
            year=year,
            today=today,
        )
        return build_report(self._storage.list_transactions(), resolved)

    def summary(self, recent: int = 5) -> Summary:
        return build_summary(self._storage.list_transactions(), recent=recent)


class UserAdminFlow:
    """
    User management for admins.

    Admins may not change their own role or delete their own account;
    both guards run before storage is touched.
    """

    def __init__(
        self,
        users: UserStorageInterface,
        audit_logger: AuditLogger,
        validator: Optional[UserValidator] = None,
    ):
        self._users = users
        self._audit = audit_logger
        self._validator = validator or UserValidator()

    def list(self) -> list[UserPublic]:
        return [user.to_public() for user in self._users.list_users()]

    def create(
        self,
        payload: dict[str, Any],
        actor: Optional[TokenUser] = None,
    ) -> UserPublic:
        cleaned = self._validator.validate_create(payload)
        if self._users.find_user_by_email(cleaned["email"]) is not None:
            raise DuplicateError("User with this email already exists")

        user = self._users.create_user(User(
            email=cleaned["email"],
            password_hash=hash_password(cleaned["password"]),
            name=cleaned["name"],
            role=cleaned["role"],
        ))
        self._audit.user_created(
            actor_id=actor.id if actor else None,
            user_id=user.id,
            role=user.role.value,
        )
        return user.to_public()

    def update(
        self,
        actor: TokenUser,
        user_id: str,
        payload: dict[str, Any],
    ) -> UserPublic:
        requested_role = payload.get("role")
        if (
            user_id == actor.id
            and requested_role
            and str(requested_role).strip().lower() != actor.role.value
        ):
            raise ForbiddenError("You cannot change your own role")

        cleaned = self._validator.validate_update(payload)

        if "email" in cleaned:
            existing = self._users.find_user_by_email(cleaned["email"])
            if existing is not None and existing.id != user_id:
                raise DuplicateError("User with this email already exists")

        updates = dict(cleaned)
        if "password" in updates:
            updates["password_hash"] = hash_password(updates.pop("password"))

        try:
            user = self._users.update_user(user_id, updates)
        except NotFoundError:
            raise NotFoundError("User not found")

        self._audit.user_updated(
            actor_id=actor.id,
            user_id=user_id,
            fields=sorted(cleaned),
        )
        return user.to_public()

    def delete(self, actor: TokenUser, user_id: str) -> None:
        if user_id == actor.id:
            raise ForbiddenError("You cannot delete your own account")
        try:
            self._users.delete_user(user_id)
        except NotFoundError:
            raise NotFoundError("User not found")
        self._audit.user_deleted(actor_id=actor.id, user_id=user_id)


class AppComponents(NamedTuple):
    settings: Settings
    client: SheetsClientInterface
    user_storage: SheetUserStorage
    transaction_storage: SheetTransactionStorage
    auth: AuthFlow
    transactions: TransactionFlow
    reports: ReportFlow
    users: UserAdminFlow


def create_app_components(
    settings: Optional[Settings] = None,
    client: Optional[SheetsClientInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Passing ``client`` overrides the configured backend (tests do this).
    """
    settings = settings or get_settings()
    app_settings = settings.app

    if client is None and app_settings.storage_backend == "memory":
        client = InMemorySheetsClient()

    if client is None:
        sheets_settings = settings.google_sheets
        client = get_sheets_client()
        users_sheet = sheets_settings.users_sheet_name
        transactions_sheet = sheets_settings.transactions_sheet_name
    else:
        users_sheet, transactions_sheet = "Users", "Transactions"

    user_storage = SheetUserStorage(client, users_sheet)
    transaction_storage = SheetTransactionStorage(client, transactions_sheet)
    audit_logger = AuditLogger()

    return AppComponents(
        settings=settings,
        client=client,
        user_storage=user_storage,
        transaction_storage=transaction_storage,
        auth=AuthFlow(
            user_storage,
            audit_logger,
            auth_settings=settings.auth,
            registration_enabled=app_settings.registration_enabled,
        ),
        transactions=TransactionFlow(transaction_storage, audit_logger),
        reports=ReportFlow(transaction_storage),
        users=UserAdminFlow(user_storage, audit_logger),
    )


def bootstrap(components: AppComponents) -> None:
    """
    Startup work: make sure both sheets exist with headers, then create
    the configured admin account if its email is not taken yet.
    """
    ensure_tables(components.user_storage, components.transaction_storage)

    app_settings = components.settings.app
    email = app_settings.bootstrap_admin_email
    password = app_settings.bootstrap_admin_password
    if not email or not password:
        return

    if components.user_storage.find_user_by_email(email) is not None:
        logger.info("bootstrap_admin_exists", email=email)
        return

    components.users.create({
        "email": email,
        "password": password,
        "name": app_settings.bootstrap_admin_name,
        "role": Role.ADMIN.value,
    })
    logger.info("bootstrap_admin_created", email=email)
