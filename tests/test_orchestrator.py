"""Tests for application wiring."""

from hisaab.models.invoice import SessionUser
from hisaab.orchestrator import create_app_components


class TestCreateAppComponents:
    """Tests for create_app_components."""

    def test_json_backed_components_share_the_data_dir(self, storage_settings):
        components = create_app_components(storage_settings=storage_settings)
        user = SessionUser(username="alice")

        assert components.auth_service.validate_or_register_user("alice", "pw") is True
        invoice = components.invoice_service.new_invoice(user, name="Wired")
        components.invoice_service.save_invoice(invoice, user)

        assert storage_settings.users_path.exists()
        assert storage_settings.invoices_path.exists()

        reopened = create_app_components(storage_settings=storage_settings)
        assert [inv.name for inv in reopened.invoice_service.list_invoices(user)] == ["Wired"]

    def test_in_memory_components(self, storage_settings):
        components = create_app_components(use_storage=False)
        user = SessionUser(username="alice")

        invoice = components.invoice_service.new_invoice(user, name="Scratch")
        components.invoice_service.save_invoice(invoice, user)

        assert len(components.invoice_service.list_invoices(user)) == 1
        assert not storage_settings.data_dir.exists()
