"""
Payload Validation

DESIGN DECISION: Validation collects every problem before failing.
A request with three bad fields gets three issues back, each naming
its field, so the form can highlight all of them at once.

IMPORTANT: Validation never silently fixes input beyond
normalization (trimming, lower-casing roles, canonical dates).
Anything it cannot interpret is reported.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field

from paysheet.models.transaction import TransactionType, is_storable_amount
from paysheet.models.user import Role
from paysheet.reports.dates import normalize_date


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class ValidationIssue(BaseModel):
    """A single validation problem."""
    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(..., description="Type of issue (missing, invalid_value, ...)")
    message: str = Field(..., description="Human-readable description")


class ValidationFailedError(Exception):
    """Raised with every issue found in a payload."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_positive_amount(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or _is_blank(value):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not is_storable_amount(amount) or amount <= 0:
        return None
    return amount


class TransactionValidator:
    """Checks transaction payloads coming from the API."""

    def validate_create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Validate a new transaction.

        Returns the cleaned fields: canonical date, typed type, Decimal
        amount, trimmed category and description.

        Raises:
            ValidationFailedError: With one issue per bad field
        """
        issues: list[ValidationIssue] = []

        for field in ("date", "type", "category", "amount"):
            if _is_blank(payload.get(field)):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field.capitalize()} is required",
                ))

        present = {f: payload[f] for f in ("date", "type", "category", "amount")
                   if not _is_blank(payload.get(f))}
        cleaned, field_issues = self._check_fields(present)
        issues.extend(field_issues)

        if issues:
            raise ValidationFailedError(issues)

        cleaned["description"] = str(payload.get("description") or "").strip()
        return cleaned

    def validate_update(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Validate a partial update. Only supplied, non-empty fields are
        checked and returned; an explicit empty description clears it.
        """
        present = {
            field: payload[field]
            for field in ("date", "type", "category", "amount")
            if not _is_blank(payload.get(field))
        }
        cleaned, issues = self._check_fields(present)
        if issues:
            raise ValidationFailedError(issues)

        if "description" in payload:
            cleaned["description"] = str(payload.get("description") or "").strip()
        return cleaned

    def _check_fields(
        self,
        fields: dict[str, Any],
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        issues: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}

        if "date" in fields:
            canonical = normalize_date(fields["date"])
            if canonical is None:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="invalid_value",
                    message="Date is not a valid date",
                ))
            else:
                cleaned["date"] = canonical

        if "type" in fields:
            try:
                cleaned["type"] = TransactionType(str(fields["type"]).strip().lower())
            except ValueError:
                issues.append(ValidationIssue(
                    field="type",
                    issue_type="invalid_value",
                    message="Type must be either income or expense",
                ))

        if "category" in fields:
            cleaned["category"] = str(fields["category"]).strip()

        if "amount" in fields:
            amount = _parse_positive_amount(fields["amount"])
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be a positive number",
                ))
            else:
                cleaned["amount"] = amount

        return cleaned, issues


class UserValidator:
    """Checks user payloads for registration and admin management."""

    def validate_create(
        self,
        payload: dict[str, Any],
        allow_role: bool = True,
    ) -> dict[str, Any]:
        """
        Validate a new user.

        Returns email, password, name and role. ``allow_role`` is False
        for self-registration, where the role is always ``user``.
        """
        issues: list[ValidationIssue] = []
        for field in ("email", "password", "name"):
            if _is_blank(payload.get(field)):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message="Email, password, and name are required",
                ))
        if issues:
            raise ValidationFailedError(issues)

        fields = {f: payload[f] for f in ("email", "password", "name")}
        if allow_role and not _is_blank(payload.get("role")):
            fields["role"] = payload["role"]

        cleaned, issues = self._check_fields(fields)
        if issues:
            raise ValidationFailedError(issues)

        cleaned.setdefault("role", Role.USER)
        return cleaned

    def validate_update(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Validate a partial user update; blank fields are ignored."""
        fields = {
            field: payload[field]
            for field in ("email", "password", "name", "role")
            if not _is_blank(payload.get(field))
        }
        cleaned, issues = self._check_fields(fields)
        if issues:
            raise ValidationFailedError(issues)
        return cleaned

    def validate_login(self, payload: dict[str, Any]) -> tuple[str, str]:
        if _is_blank(payload.get("email")) or _is_blank(payload.get("password")):
            raise ValidationFailedError([ValidationIssue(
                field="email" if _is_blank(payload.get("email")) else "password",
                issue_type="missing",
                message="Email and password are required",
            )])
        return str(payload["email"]).strip(), str(payload["password"])

    def _check_fields(
        self,
        fields: dict[str, Any],
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        issues: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}

        if "email" in fields:
            email = str(fields["email"]).strip()
            if not EMAIL_RE.match(email):
                issues.append(ValidationIssue(
                    field="email",
                    issue_type="invalid_value",
                    message="Invalid email format",
                ))
            else:
                cleaned["email"] = email

        if "password" in fields:
            password = str(fields["password"])
            if len(password) < MIN_PASSWORD_LENGTH:
                issues.append(ValidationIssue(
                    field="password",
                    issue_type="too_short",
                    message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                ))
            else:
                cleaned["password"] = password

        if "name" in fields:
            cleaned["name"] = str(fields["name"]).strip()

        if "role" in fields:
            try:
                cleaned["role"] = Role.parse(str(fields["role"]))
            except ValueError:
                issues.append(ValidationIssue(
                    field="role",
                    issue_type="invalid_value",
                    message='Role must be either "admin" or "user"',
                ))

        return cleaned, issues
