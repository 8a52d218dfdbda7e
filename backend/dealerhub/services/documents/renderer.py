"""
Printable quote and order documents rendered with Jinja2.

Templates live in ``dealerhub/templates/documents``. Amounts are formatted
the Italian way (``€ 23.500,00``) and dates as ``dd/mm/yyyy``.
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from dealerhub.core.logging import get_logger
from dealerhub.repositories.base import RecordNotFoundError
from dealerhub.repositories.registry import RepositoryRegistry

logger = get_logger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "documents"


class DocumentRenderError(Exception):
    """Raised when a document template cannot be loaded or rendered."""

    def __init__(self, message: str, template_name: Optional[str] = None):
        super().__init__(message)
        self.template_name = template_name


def format_currency(value: Union[Decimal, int, float, None]) -> str:
    """Format an amount as euros with Italian separators."""
    if value is None:
        return "-"
    formatted = f"{Decimal(value):,.2f}"
    return "€ " + formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def format_date(value: Union[datetime, date, str, None]) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime("%d/%m/%Y")


def yes_no(value: Any) -> str:
    return "Sì" if value else "No"


class DocumentRenderer:
    """Loads the document templates and renders them to HTML strings."""

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        self.template_dir = Path(template_dir or DEFAULT_TEMPLATE_DIR)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = format_currency
        self.env.filters["date"] = format_date
        self.env.filters["yes_no"] = yes_no

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Raises:
            DocumentRenderError: If the template is missing or fails to render
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            logger.error("Document template not found", template=template_name)
            raise DocumentRenderError(
                f"Template not found: {template_name}", template_name=template_name
            ) from e
        except TemplateError as e:
            logger.error("Document rendering failed", template=template_name, error=str(e))
            raise DocumentRenderError(
                f"Failed to render {template_name}: {e}", template_name=template_name
            ) from e


class DocumentService:
    """Collects the records a document shows and renders it."""

    def __init__(
        self,
        repositories: RepositoryRegistry,
        renderer: Optional[DocumentRenderer] = None,
    ):
        self.repositories = repositories
        self.renderer = renderer or DocumentRenderer()

    async def _optional(self, repository, record_id: Optional[str]):
        if not record_id:
            return None
        try:
            return await repository.get_by_id(record_id)
        except RecordNotFoundError:
            logger.warning(
                "Document references a missing record",
                entity=repository.entity,
                record_id=record_id,
            )
            return None

    async def render_quote(self, quote_id: str) -> str:
        quote = await self.repositories.quotes.get_by_id(quote_id)
        vehicle = await self._optional(self.repositories.vehicles, quote.vehicle_id)
        dealer = await self._optional(self.repositories.dealers, quote.dealer_id)

        html = self.renderer.render(
            "quote.html", {"quote": quote, "vehicle": vehicle, "dealer": dealer}
        )
        logger.info("Quote document rendered", quote_id=quote_id)
        return html

    async def render_order(self, order_id: str) -> str:
        order = await self.repositories.orders.get_by_id(order_id)
        vehicle = await self._optional(self.repositories.vehicles, order.vehicle_id)
        dealer = await self._optional(self.repositories.dealers, order.dealer_id)

        html = self.renderer.render(
            "order.html", {"order": order, "vehicle": vehicle, "dealer": dealer}
        )
        logger.info("Order document rendered", order_id=order_id)
        return html
