# regdesk/services/ticket_issuance.py
"""
Ticket Issuance Service

Takes intake data through the server-mode gate, validation and duplicate
checks, then persists the registration with a freshly issued ticket number
and starts badge asset generation.
"""

import hmac
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from regdesk.core.permissions import Permission
from regdesk.core.security import (
    email_lookup_hash,
    identity_lookup_hash,
    name_lookup_hash,
    request_fingerprint,
)
from regdesk.core.storage import AssetStorageError
from regdesk.crud.crud_print_status import print_status as print_status_crud
from regdesk.crud.crud_registration import registration as registration_crud
from regdesk.middleware.error_handler import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationMissing,
    ConflictError,
    NotFoundError,
    ServiceUnavailable,
    ValidationError,
    validation_fields,
)
from regdesk.models.registration import Registration
from regdesk.models.user import User
from regdesk.schemas.registration import (
    PaymentStatus,
    RegistrationCreate,
    RegistrationType,
    RegistrationUpdate,
)
from regdesk.services import badge_assets, server_mode_gate

logger = logging.getLogger(__name__)

CHANNELS = frozenset(t.value for t in RegistrationType)
STAFF_CHANNELS = frozenset(
    {RegistrationType.pre_registered.value, RegistrationType.complimentary.value}
)

# Optional text fields where a blank value is stored as NULL
OPTIONAL_TEXT_FIELDS = (
    "email",
    "phone",
    "address",
    "company_name",
    "job_title",
    "industry",
    "country",
    "age_range",
    "gender",
    "referral_source",
)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _add_error(fields: Dict[str, List[str]], field: str, message: str) -> None:
    fields.setdefault(field, []).append(message)


class TicketIssuanceService:
    """Sole writer of registration identity fields."""

    # ========================================
    # Intake
    # ========================================

    def register(
        self,
        db: Session,
        payload: Dict[str, Any],
        actor: Optional[User],
        store=None,
        idempotency_key: Optional[str] = None,
    ) -> Tuple[Registration, bool]:
        """
        Registers an attendee. Returns ``(registration, created)``; ``created`` is
        False when an earlier request with the same idempotency key is replayed.

        A key only replays the request it was first sent with, by the same
        caller, and only once the gate and channel permission have passed.
        """
        current = server_mode_gate.get_current_mode(db)
        channel, channel_given = self._resolve_channel(payload, current.mode)
        if channel is None:
            # Unknown channel: report it together with every other invalid field
            self._validate_intake(payload, None)
            raise ValidationError(
                {"registration_type": ["The selected registration type is invalid."]}
            )
        server_mode_gate.ensure_intake_allowed(current.mode, channel)
        self._ensure_channel_permission(actor, channel)

        request_hash = None
        if idempotency_key:
            request_hash = request_fingerprint(payload, actor.id if actor else None)
            existing = self._replay(db, idempotency_key, request_hash)
            if existing:
                return existing, False

        data = dict(payload)
        if not channel_given:
            data["registration_type"] = channel
        intake = self._validate_intake(data, channel)

        identity_hash = identity_lookup_hash(
            intake.first_name, intake.last_name, intake.company_name
        )
        name_hash = name_lookup_hash(intake.first_name, intake.last_name)
        self._ensure_new_person(db, channel, identity_hash, name_hash)

        email_hash = email_lookup_hash(intake.email)
        if email_hash and registration_crud.get_by_email_hash(db, email_hash=email_hash):
            logger.info("Duplicate email rejected at intake")
            raise ConflictError("The email has already been taken.", details={"field": "email"})

        badge_status = print_status_crud.get_by_name(db, type="badge", name="not_printed")
        ticket_status = print_status_crud.get_by_name(db, type="ticket", name="not_printed")
        if not badge_status or not ticket_status:
            raise ConfigurationMissing("Print statuses not configured")

        payment_status = intake.payment_status or (
            PaymentStatus.complimentary
            if channel == RegistrationType.complimentary.value
            else PaymentStatus.unpaid
        )

        create_data = intake.model_dump(
            include={"first_name", "last_name", *OPTIONAL_TEXT_FIELDS}
        )
        for field in OPTIONAL_TEXT_FIELDS:
            if not _present(create_data.get(field)):
                create_data[field] = None
        create_data.update(
            ticket_number=str(uuid.uuid4()),
            email_hash=email_hash,
            identity_hash=identity_hash,
            name_hash=name_hash,
            registration_type=channel,
            payment_status=payment_status.value,
            server_mode=current.mode,
            badge_status_id=badge_status.id,
            ticket_status_id=ticket_status.id,
            confirmed=False,
            registered_by=actor.id if actor else None,
            idempotency_key=idempotency_key,
            request_hash=request_hash,
        )

        try:
            registration = registration_crud.create_from_data(db, data=create_data)
        except IntegrityError:
            db.rollback()
            if idempotency_key:
                # A concurrent request with the same key won the insert
                existing = self._replay(db, idempotency_key, request_hash)
                if existing:
                    return existing, False
            logger.warning("Registration insert hit a unique constraint")
            raise ConflictError(
                "A registration with the same identity or email already exists."
            )
        except OperationalError as exc:
            db.rollback()
            logger.error(f"Database unavailable while saving registration: {exc}")
            raise ServiceUnavailable(
                "Registration could not be saved. Please try again.", service="database"
            )

        logger.info(
            f"Registration {registration.ticket_number} created via {channel} "
            f"in '{current.mode}' mode"
        )
        self._issue_asset(db, store, registration, channel)
        return registration, True

    def _resolve_channel(
        self, payload: Dict[str, Any], mode: str
    ) -> Tuple[Optional[str], bool]:
        """
        Returns the intake channel and whether the caller named it. A missing
        value falls back to the mode's default; an unknown one yields None.
        """
        raw = payload.get("registration_type")
        if isinstance(raw, str) and raw in CHANNELS:
            return raw, True
        if _present(raw):
            return None, True
        fallback = server_mode_gate.default_channel_for(mode) or RegistrationType.online.value
        return fallback, False

    def _replay(
        self, db: Session, idempotency_key: str, request_hash: str
    ) -> Optional[Registration]:
        existing = registration_crud.get_by_idempotency_key(db, key=idempotency_key)
        if existing is None:
            return None
        if existing.request_hash is None or not hmac.compare_digest(
            existing.request_hash, request_hash
        ):
            logger.warning("Idempotency key reused with a different caller or request body")
            raise ConflictError(
                "The idempotency key has already been used for a different request.",
                details={"field": "idempotency_key"},
            )
        logger.info(f"Replaying registration {existing.ticket_number} for idempotency key")
        return existing

    def _ensure_new_person(
        self,
        db: Session,
        channel: str,
        identity_hash: str,
        name_hash: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        """
        Kiosk channels compare name and company; staff channels compare the
        name alone, so a changed company string does not issue a second badge.
        """
        other = registration_crud.get_by_identity_hash(db, identity_hash=identity_hash)
        duplicate = other is not None and other.id != exclude_id
        if not duplicate and channel in STAFF_CHANNELS:
            duplicate = (
                registration_crud.get_by_name_hash(
                    db, name_hash=name_hash, exclude_id=exclude_id
                )
                is not None
            )
        if duplicate:
            logger.info("Duplicate person rejected")
            raise ConflictError(
                "A registration for this person already exists.",
                details={"field": "identity"},
            )

    def _ensure_channel_permission(self, actor: Optional[User], channel: str) -> None:
        # Only the public online form is open to anonymous callers
        if channel == RegistrationType.online.value:
            return
        if actor is None:
            raise AuthenticationError(f"Authentication required for {channel} registration.")
        if not actor.role.allows(Permission.CREATE_REGISTRATION):
            raise AuthorizationError()

    def _validate_intake(
        self, data: Dict[str, Any], channel: Optional[str]
    ) -> RegistrationCreate:
        """Schema and channel rules together, so every violated field is reported at once."""
        fields: Dict[str, List[str]] = {}
        intake = None
        try:
            intake = RegistrationCreate.model_validate(data)
        except PydanticValidationError as exc:
            fields = validation_fields(exc.errors())

        raw_type = data.get("registration_type")
        if isinstance(raw_type, str) and raw_type in CHANNELS:
            self._check_channel_rules(data, channel, fields)

        if fields:
            raise ValidationError(fields)
        return intake

    def _check_channel_rules(
        self, data: Dict[str, Any], channel: str, fields: Dict[str, List[str]]
    ) -> None:
        if channel == RegistrationType.online.value and not _present(data.get("company_name")):
            _add_error(
                fields, "company_name", "The company name field is required for online registration."
            )
        if channel == RegistrationType.pre_registered.value and not _present(data.get("email")):
            _add_error(fields, "email", "The email field is required for pre-registration.")

        payment_status = data.get("payment_status")
        if not _present(payment_status):
            return
        if channel == RegistrationType.complimentary.value:
            if payment_status != PaymentStatus.complimentary.value:
                _add_error(
                    fields,
                    "payment_status",
                    "Complimentary registrations must have payment status complimentary.",
                )
        elif payment_status == PaymentStatus.complimentary.value:
            _add_error(
                fields,
                "payment_status",
                "Only complimentary registrations can have payment status complimentary.",
            )

    def _issue_asset(self, db: Session, store, registration: Registration, channel: str) -> None:
        # Asset failures are logged and handed to the worker; the intake already succeeded
        if channel == RegistrationType.online.value and store is not None:
            try:
                badge_assets.generate_for_registration(db, store, registration)
                return
            except (AssetStorageError, OSError, ValueError, SQLAlchemyError) as exc:
                db.rollback()
                logger.warning(
                    f"Synchronous QR generation failed for {registration.ticket_number}, "
                    f"falling back to the worker: {exc}"
                )
        badge_assets.enqueue(registration.ticket_number)

    # ========================================
    # Lookup & edits
    # ========================================

    def get_by_ticket(self, db: Session, ticket_number: str) -> Registration:
        registration = registration_crud.get_by_ticket(db, ticket_number=ticket_number)
        if registration is None:
            raise NotFoundError(
                f"Registration with ticket number {ticket_number} not found.",
                details={"ticket_number": ticket_number},
            )
        return registration

    def list_registrations(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        registration_type: Optional[str] = None,
        confirmed: Optional[bool] = None,
    ) -> Tuple[List[Registration], int]:
        return registration_crud.get_multi_filtered(
            db,
            skip=skip,
            limit=limit,
            search=search,
            registration_type=registration_type,
            confirmed=confirmed,
        )

    def update_identity(
        self, db: Session, ticket_number: str, changes: Dict[str, Any]
    ) -> Registration:
        """
        Corrects identity or survey fields. Confirmed registrations are frozen;
        only the check-in state machine may touch them afterwards.
        """
        registration = self.get_by_ticket(db, ticket_number)
        if registration.confirmed:
            raise ConflictError(
                "Registration is confirmed and can no longer be edited.",
                details={"ticket_number": ticket_number},
            )

        fields: Dict[str, List[str]] = {}
        try:
            update = RegistrationUpdate.model_validate(changes)
        except PydanticValidationError as exc:
            raise ValidationError(validation_fields(exc.errors())) from None

        data = update.model_dump(exclude_unset=True)
        for field in ("first_name", "last_name"):
            if field in data and not _present(data[field]):
                _add_error(fields, field, f"The {field.replace('_', ' ')} field is required.")
        for field in OPTIONAL_TEXT_FIELDS:
            if field in data and not _present(data[field]):
                data[field] = None

        merged = {
            "first_name": data.get("first_name", registration.first_name),
            "last_name": data.get("last_name", registration.last_name),
            "company_name": data.get("company_name", registration.company_name),
            "email": data.get("email", registration.email),
            "registration_type": registration.registration_type,
        }
        if data.get("payment_status") is not None:
            data["payment_status"] = data["payment_status"].value
            merged["payment_status"] = data["payment_status"]
        else:
            data.pop("payment_status", None)
        self._check_channel_rules(merged, registration.registration_type, fields)
        if fields:
            raise ValidationError(fields)

        identity_hash = identity_lookup_hash(
            merged["first_name"], merged["last_name"], merged["company_name"]
        )
        name_hash = name_lookup_hash(merged["first_name"], merged["last_name"])
        self._ensure_new_person(
            db,
            registration.registration_type,
            identity_hash,
            name_hash,
            exclude_id=registration.id,
        )
        email_hash = email_lookup_hash(merged["email"])
        if email_hash and email_hash != registration.email_hash:
            other = registration_crud.get_by_email_hash(db, email_hash=email_hash)
            if other and other.id != registration.id:
                raise ConflictError(
                    "The email has already been taken.", details={"field": "email"}
                )

        data["identity_hash"] = identity_hash
        data["name_hash"] = name_hash
        data["email_hash"] = email_hash
        try:
            registration = registration_crud.update(db, db_obj=registration, obj_in=data)
        except IntegrityError:
            db.rollback()
            raise ConflictError("A registration with the same identity or email already exists.")

        changed = sorted(set(data) - {"identity_hash", "name_hash", "email_hash"})
        logger.info(f"Registration {ticket_number} updated: {changed}")
        return registration


ticket_issuance = TicketIssuanceService()
