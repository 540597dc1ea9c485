"""
Application wiring for Hisaab

Builds the services the front-end talks to. The UI never constructs a
store itself; it asks create_app_components() once and keeps the result.
"""

from typing import NamedTuple, Optional

import structlog

from hisaab.auth import AuthenticationService, PlaintextAuthenticationService
from hisaab.config import StorageSettings, get_settings
from hisaab.export import InvoicePdfRenderer
from hisaab.invoices import InvoiceService
from hisaab.services.storage import (
    InMemoryInvoiceStorage,
    InMemoryUserStorage,
    JsonFileClient,
    JsonFileInvoiceStorage,
    JsonFileUserStorage,
)


logger = structlog.get_logger(__name__)


class AppComponents(NamedTuple):
    invoice_service: InvoiceService
    auth_service: AuthenticationService
    pdf_renderer: InvoicePdfRenderer


def create_app_components(
    use_storage: bool = True,
    storage_settings: Optional[StorageSettings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to back the services with the JSON files.
                    Set to False for a throwaway in-memory session.
        storage_settings: Overrides the configured storage location.

    Returns:
        AppComponents(invoice_service, auth_service, pdf_renderer)
    """
    if use_storage:
        client = JsonFileClient(storage_settings or get_settings().storage)
        invoice_storage = JsonFileInvoiceStorage(client)
        user_storage = JsonFileUserStorage(client)
        logger.info("components_created", backend="json", data_dir=str(client.invoices_path.parent))
    else:
        invoice_storage = InMemoryInvoiceStorage()
        user_storage = InMemoryUserStorage()
        logger.info("components_created", backend="memory")

    return AppComponents(
        invoice_service=InvoiceService(invoice_storage),
        auth_service=PlaintextAuthenticationService(user_storage),
        pdf_renderer=InvoicePdfRenderer(),
    )
