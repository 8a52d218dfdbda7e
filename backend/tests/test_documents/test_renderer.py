"""
Tests for the printable quote and order documents.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from dealerhub.repositories.base import RecordNotFoundError
from dealerhub.schemas.orders import OrderCreate
from dealerhub.schemas.quotes import QuoteCreate
from dealerhub.schemas.vehicles import VehicleCreate
from dealerhub.services.documents.renderer import (
    DocumentRenderError,
    DocumentRenderer,
    DocumentService,
    format_currency,
    format_date,
    yes_no,
)
from dealerhub.services.orders.service import OrderService
from dealerhub.services.quotes.service import QuoteService
from dealerhub.services.vehicles.service import VehicleService


# ============================================================================
# Filters
# ============================================================================


class TestFilters:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("23500"), "€ 23.500,00"),
            (Decimal("1234567.5"), "€ 1.234.567,50"),
            (0, "€ 0,00"),
            (None, "-"),
        ],
    )
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_format_date(self):
        assert format_date(date(2026, 3, 2)) == "02/03/2026"
        assert format_date("2026-03-02T10:00:00Z") == "02/03/2026"
        assert format_date("domani") == "domani"
        assert format_date(None) == "-"

    def test_yes_no(self):
        assert yes_no(True) == "Sì"
        assert yes_no(False) == "No"


# ============================================================================
# Renderer
# ============================================================================


class TestDocumentRenderer:
    def test_missing_template(self):
        with pytest.raises(DocumentRenderError) as exc_info:
            DocumentRenderer().render("invoice.html", {})

        assert exc_info.value.template_name == "invoice.html"

    def test_undefined_variable_fails(self, tmp_path):
        (tmp_path / "broken.html").write_text("{{ quote.customer_name }}")

        with pytest.raises(DocumentRenderError):
            DocumentRenderer(tmp_path).render("broken.html", {})

    def test_autoescape(self, tmp_path):
        (tmp_path / "note.html").write_text("<p>{{ text }}</p>")

        html = DocumentRenderer(tmp_path).render("note.html", {"text": "<b>Rossi</b>"})

        assert html == "<p>&lt;b&gt;Rossi&lt;/b&gt;</p>"


# ============================================================================
# Quote and Order Documents
# ============================================================================


class TestDocumentService:
    @pytest.fixture
    async def vehicle(self, registry, catalog, aurora):
        return await VehicleService(registry).create_vehicle(VehicleCreate(**aurora()))

    @pytest.mark.asyncio
    async def test_quote_document(self, registry, vehicle, dealer):
        quote = await QuoteService(registry).create_quote(
            QuoteCreate(
                vehicle_id=vehicle.id,
                dealer_id=dealer.id,
                customer_name="Giulia Bianchi",
                discount=Decimal("1500"),
                accessories=["Tappetini"],
            )
        )

        html = await DocumentService(registry).render_quote(quote.id)

        assert "Giulia Bianchi" in html
        assert "Autocirelli Milano Srl" in html
        assert "ZCF123456789" in html
        assert "Tappetini" in html
        assert "€ 22.500,00" in html

    @pytest.mark.asyncio
    async def test_order_document_without_vehicle(self, registry, vehicle, dealer):
        order = await OrderService(registry).create_order(
            OrderCreate(vehicle_id=vehicle.id, dealer_id=dealer.id, customer_name="Mario Rossi")
        )
        await registry.vehicles.delete(vehicle.id)

        html = await DocumentService(registry).render_order(order.id)

        assert "Ordine n° 1" in html
        assert "Mario Rossi" in html
        assert "Aurora" in html
        assert "Da generare" in html
        assert "€ 50.000,00" in html

    @pytest.mark.asyncio
    async def test_missing_quote(self, registry):
        with pytest.raises(RecordNotFoundError):
            await DocumentService(registry).render_quote("missing")

    @pytest.mark.asyncio
    async def test_order_date_formatting(self, registry, vehicle, dealer):
        order = await OrderService(registry).create_order(
            OrderCreate(vehicle_id=vehicle.id, dealer_id=dealer.id, customer_name="Mario Rossi")
        )

        html = await DocumentService(registry).render_order(order.id)

        assert datetime.now(timezone.utc).strftime("%d/%m/%Y") in html
