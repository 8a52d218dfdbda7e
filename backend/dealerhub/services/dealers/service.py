"""
Dealer management service.

Dealer CRUD with hashed passwords and unique emails, logo uploads through
the blob storage backend, and the dealer credit (plafond) position.
"""

from decimal import Decimal
from typing import Any, Optional

from dealerhub.core.config import get_settings
from dealerhub.core.logging import get_logger
from dealerhub.core.security import hash_password
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.dealers import Dealer, DealerCreate, DealerCredit, DealerUpdate
from dealerhub.services.storage.blob_storage import BlobStorage, create_blob_storage

logger = get_logger(__name__)

LOGO_FOLDER = "dealer-logos"
LOGO_CONTENT_TYPES = frozenset({"image/png", "image/jpeg", "image/svg+xml", "image/webp"})


class DealerServiceError(Exception):
    """Base exception for dealer service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class DealerValidationError(DealerServiceError):
    def __init__(self, message: str, **context: Any):
        super().__init__(message, code="DEALER_VALIDATION_ERROR", **context)


class DuplicateDealerEmailError(DealerServiceError):
    def __init__(self, email: str):
        super().__init__(
            f"A dealer with email {email} already exists",
            code="DEALER_EMAIL_EXISTS",
            email=email,
        )


def calculate_available_credit(dealer: Dealer, default_limit: Optional[Decimal] = None) -> Decimal:
    """Credit the dealer can still use: its limit, or the default when unset."""
    if dealer.credit_limit is not None:
        return dealer.credit_limit
    return default_limit if default_limit is not None else get_settings().default_credit_limit


def can_place_order(
    dealer: Dealer, amount: Decimal, default_limit: Optional[Decimal] = None
) -> bool:
    return Decimal(amount) <= calculate_available_credit(dealer, default_limit)


class DealerService:
    """Business logic for dealer records."""

    def __init__(
        self,
        repositories: RepositoryRegistry,
        storage: Optional[BlobStorage] = None,
    ):
        self.repositories = repositories
        self.storage = storage or create_blob_storage()
        self.settings = get_settings()

    async def list_dealers(self, active_only: bool = False) -> list[Dealer]:
        dealers = (
            await self.repositories.dealers.find_by(is_active=True)
            if active_only
            else await self.repositories.dealers.get_all()
        )
        return sorted(dealers, key=lambda dealer: dealer.company_name.lower())

    async def get_dealer(self, dealer_id: str) -> Dealer:
        return await self.repositories.dealers.get_by_id(dealer_id)

    async def _ensure_unique_email(self, email: str, exclude_id: Optional[str] = None) -> None:
        for dealer in await self.repositories.dealers.find_by(email=email):
            if dealer.id != exclude_id:
                raise DuplicateDealerEmailError(email)

    async def create_dealer(self, data: DealerCreate) -> Dealer:
        """
        Register a dealer.

        Raises:
            DuplicateDealerEmailError: If the email is already in use
        """
        await self._ensure_unique_email(data.email)

        values = data.model_dump()
        values["password"] = hash_password(data.password)
        dealer = await self.repositories.dealers.create(values)

        logger.info("Dealer created", dealer_id=dealer.id, company_name=dealer.company_name)
        return dealer

    async def update_dealer(self, dealer_id: str, data: DealerUpdate) -> Dealer:
        """
        Update dealer fields; a new password is hashed before storing.

        Raises:
            RecordNotFoundError: If the dealer does not exist
            DuplicateDealerEmailError: If the new email belongs to another dealer
        """
        await self.repositories.dealers.get_by_id(dealer_id)
        changes = data.model_dump(exclude_unset=True)
        # credit_limit may be cleared to fall back on the default plafond
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or key == "credit_limit"
        }

        if "email" in changes:
            await self._ensure_unique_email(changes["email"], exclude_id=dealer_id)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])

        dealer = await self.repositories.dealers.update(dealer_id, changes)
        logger.info(
            "Dealer updated",
            dealer_id=dealer_id,
            fields=sorted(key for key in changes if key != "password"),
            password_changed="password" in changes,
        )
        return dealer

    async def delete_dealer(self, dealer_id: str) -> None:
        await self.repositories.dealers.delete(dealer_id)
        logger.info("Dealer deleted", dealer_id=dealer_id)

    async def upload_logo(
        self,
        dealer_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str],
    ) -> Dealer:
        """
        Store a logo image and link it to the dealer.

        Raises:
            DealerValidationError: If the file is not a supported image type
            BlobStorageError: If the upload fails
        """
        await self.repositories.dealers.get_by_id(dealer_id)
        if content_type not in LOGO_CONTENT_TYPES:
            raise DealerValidationError(
                "Logo must be a PNG, JPEG, SVG or WebP image",
                dealer_id=dealer_id,
                content_type=content_type,
            )

        url = await self.storage.upload(f"{LOGO_FOLDER}/{dealer_id}", filename, content, content_type)
        dealer = await self.repositories.dealers.update(dealer_id, {"logo": url})
        logger.info("Dealer logo uploaded", dealer_id=dealer_id, url=url)
        return dealer

    async def credit_position(
        self, dealer_id: str, amount: Optional[Decimal] = None
    ) -> DealerCredit:
        """Available credit of a dealer and, for an amount, whether it fits."""
        dealer = await self.repositories.dealers.get_by_id(dealer_id)
        default_limit = self.settings.default_credit_limit
        available = calculate_available_credit(dealer, default_limit)

        return DealerCredit(
            dealer_id=dealer.id,
            credit_limit=(
                dealer.credit_limit if dealer.credit_limit is not None else default_limit
            ),
            available_credit=available,
            amount=amount,
            can_place_order=(
                can_place_order(dealer, amount, default_limit) if amount is not None else None
            ),
        )
