"""
Test suite for the dealer management service.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from dealerhub.core.security import PasswordError, hash_password, pwd_context
from dealerhub.repositories.base import RecordNotFoundError
from dealerhub.schemas.dealers import DealerCreate, DealerUpdate
from dealerhub.services.dealers.service import (
    DealerService,
    DealerValidationError,
    DuplicateDealerEmailError,
    calculate_available_credit,
    can_place_order,
)
from dealerhub.services.storage.blob_storage import BlobStorageError


@pytest.fixture
def service(registry, fake_storage) -> DealerService:
    return DealerService(registry, storage=fake_storage)


@pytest.fixture
def dealer_data():
    def build(**overrides) -> DealerCreate:
        values = {
            "company_name": "Autocirelli Roma Srl",
            "email": "Roma@Autocirelli.it",
            "password": "segreto-123",
            "city": "Roma",
        }
        values.update(overrides)
        return DealerCreate(**values)

    return build


# ============================================================================
# Password Hashing
# ============================================================================


class TestPasswordHashing:
    def test_hash_is_verifiable(self):
        hashed = hash_password("segreto-123")

        assert hashed != "segreto-123"
        assert pwd_context.verify("segreto-123", hashed)
        assert not pwd_context.verify("sbagliata", hashed)

    def test_empty_password_rejected(self):
        with pytest.raises(PasswordError) as exc_info:
            hash_password("")

        assert exc_info.value.code == "EMPTY_PASSWORD"


# ============================================================================
# Dealer CRUD
# ============================================================================


class TestDealerCrud:
    @pytest.mark.asyncio
    async def test_create_hashes_password_and_normalizes_email(self, service, dealer_data):
        dealer = await service.create_dealer(dealer_data())

        assert dealer.email == "roma@autocirelli.it"
        assert dealer.password != "segreto-123"
        assert pwd_context.verify("segreto-123", dealer.password)
        assert dealer.is_active

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, service, dealer_data):
        await service.create_dealer(dealer_data())

        with pytest.raises(DuplicateDealerEmailError) as exc_info:
            await service.create_dealer(dealer_data(company_name="Altro Srl"))

        assert exc_info.value.code == "DEALER_EMAIL_EXISTS"

    @pytest.mark.asyncio
    async def test_update_keeps_own_email(self, service, dealer_data):
        dealer = await service.create_dealer(dealer_data())

        updated = await service.update_dealer(
            dealer.id, DealerUpdate(email="roma@autocirelli.it", city="Ostia")
        )

        assert updated.city == "Ostia"

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, service, dealer_data, dealer):
        created = await service.create_dealer(dealer_data())

        with pytest.raises(DuplicateDealerEmailError):
            await service.update_dealer(created.id, DealerUpdate(email=dealer.email))

    @pytest.mark.asyncio
    async def test_update_rehashes_password(self, service, dealer_data):
        dealer = await service.create_dealer(dealer_data())

        updated = await service.update_dealer(dealer.id, DealerUpdate(password="nuova-password"))

        assert pwd_context.verify("nuova-password", updated.password)

    @pytest.mark.asyncio
    async def test_clear_credit_limit(self, service, dealer_data):
        dealer = await service.create_dealer(dealer_data(credit_limit=Decimal("10000")))

        updated = await service.update_dealer(dealer.id, DealerUpdate(credit_limit=None))

        assert updated.credit_limit is None

    @pytest.mark.asyncio
    async def test_list_sorted_by_company_name(self, service, dealer_data, dealer):
        await service.create_dealer(dealer_data(company_name="Zeta Motori", is_active=False))
        await service.create_dealer(
            dealer_data(company_name="alfa auto", email="alfa@example.it")
        )

        names = [d.company_name for d in await service.list_dealers()]
        active = [d.company_name for d in await service.list_dealers(active_only=True)]

        assert names == ["alfa auto", "Autocirelli Milano Srl", "Zeta Motori"]
        assert "Zeta Motori" not in active

    @pytest.mark.asyncio
    async def test_delete(self, service, dealer):
        await service.delete_dealer(dealer.id)

        with pytest.raises(RecordNotFoundError):
            await service.get_dealer(dealer.id)


# ============================================================================
# Logo Upload
# ============================================================================


class TestLogoUpload:
    @pytest.mark.asyncio
    async def test_upload_links_logo(self, service, dealer, fake_storage):
        updated = await service.upload_logo(dealer.id, "logo.png", b"\x89PNG", "image/png")

        assert updated.logo == "https://files.test/dealer-logos/dealer-milano/logo.png"
        assert fake_storage.uploads[0]["content_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, service, dealer, fake_storage):
        with pytest.raises(DealerValidationError):
            await service.upload_logo(dealer.id, "logo.pdf", b"%PDF", "application/pdf")

        assert fake_storage.uploads == []

    @pytest.mark.asyncio
    async def test_storage_failure_leaves_dealer_unchanged(self, registry, dealer):
        storage = AsyncMock()
        storage.upload.side_effect = BlobStorageError(
            "Storage service unreachable", code="UPLOAD_FAILED"
        )
        service = DealerService(registry, storage=storage)

        with pytest.raises(BlobStorageError):
            await service.upload_logo(dealer.id, "logo.png", b"\x89PNG", "image/png")

        assert (await registry.dealers.get_by_id(dealer.id)).logo is None


# ============================================================================
# Credit Position
# ============================================================================


class TestCreditPosition:
    @pytest.mark.asyncio
    async def test_credit_with_amount(self, service, dealer):
        credit = await service.credit_position(dealer.id, Decimal("60000"))

        assert credit.credit_limit == Decimal("50000")
        assert credit.available_credit == Decimal("50000")
        assert credit.can_place_order is False

    @pytest.mark.asyncio
    async def test_credit_without_amount(self, service, dealer):
        credit = await service.credit_position(dealer.id)

        assert credit.amount is None
        assert credit.can_place_order is None

    @pytest.mark.asyncio
    async def test_default_limit_when_unset(self, service, dealer_data):
        dealer = await service.create_dealer(dealer_data())

        credit = await service.credit_position(dealer.id, Decimal("300000"))

        assert credit.credit_limit == Decimal("300000")
        assert credit.can_place_order is True

    @pytest.mark.asyncio
    async def test_helpers(self, dealer):
        assert calculate_available_credit(dealer) == Decimal("50000")
        assert can_place_order(dealer, Decimal("50000"))
        assert not can_place_order(dealer, Decimal("50000.01"))
