"""
Integration tests for the finance service, settings and audit logger.
"""

import json
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from finplan.audit import AuditLogger
from finplan.config import Settings, get_settings, validate_all_settings
from finplan.models import AuditEventBuilder, AuditEventType, Expense, Income
from finplan.orchestrator import FinanceService, create_app_components
from finplan.services.backup import BackupRejectedError
from finplan.services.records import FallbackRecordSource
from finplan.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    InMemoryAuditStorage,
    InMemoryRecordSource,
    StorageError,
)


class DownRecordSource(InMemoryRecordSource):
    """A backend that is never reachable."""

    def list_expenses(self):
        raise ConnectionError("offline")


class TitleCaseRecordSource(InMemoryRecordSource):
    """A backend that normalises names on write."""

    def save_expense(self, expense):
        return super().save_expense(expense.model_copy(update={"name": expense.name.title()}))


class FailingAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise StorageError("disk full")

    def get_events_by_entity(self, entity_type, entity_id):
        return []

    def get_recent_events(self, limit=100):
        return []


@pytest.fixture
def records():
    return {
        "expenses": [
            Expense(id=1, person="Alex", name="Rent", category="Housing",
                    amount=Decimal("1200"), date="2024-05-03"),
            Expense(id=2, person="Sam", name="Bus", category="Transportation",
                    amount=Decimal("25"), frequency="weekly", date="2024-04-10"),
        ],
        "incomes": [
            Income(id=3, person="Alex", source="Job", amount=Decimal("4000")),
            Income(id=4, person="Sam", source="Shop", amount=Decimal("1500"), is_gross=False),
        ],
    }


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def service(records, audit_storage):
    audit_logger = AuditLogger(audit_storage)
    source = FallbackRecordSource(
        primary=InMemoryRecordSource(**records),
        fallback=InMemoryRecordSource(),
        audit_logger=audit_logger,
        retry_max_wait_seconds=0,
    )
    service = FinanceService(record_source=source, audit_logger=audit_logger)
    service.refresh()
    return service


@pytest.fixture
def clean_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestFinanceService:
    """Tests for the dashboard and record flows."""

    def test_refresh_loads_records(self, service):
        assert [e.id for e in service.expenses] == [1, 2]
        assert service.online is True

    def test_dashboard_for_everyone(self, service):
        view = service.dashboard(reference_date=date(2024, 5, 31))

        assert view.selected_persons == "all"
        assert view.totals.monthly_income == pytest.approx(3000.0 + 1500.0)
        assert view.totals.monthly_expenses == pytest.approx(1200.0 + 25 * 4.345)
        assert list(view.persons) == ["Alex", "Sam"]
        assert view.trend[-1].label == "May 24"
        assert view.trend[-1].total == pytest.approx(1200.0)
        assert view.trend[-2].total == pytest.approx(25.0)
        assert view.online is True

    def test_dashboard_follows_person_filter(self, service):
        service.toggle_person("Sam")
        view = service.dashboard(reference_date=date(2024, 5, 31))

        assert view.selected_persons == ["Sam"]
        assert list(view.persons) == ["Sam"]
        assert view.expenses_by_category == {"Transportation": pytest.approx(25 * 4.345)}

        service.select_all_persons()
        assert service.dashboard().selected_persons == "all"

    def test_record_writes_update_cache(self, service):
        service.save_expense(Expense(id=1, person="Alex", name="Rent", amount=Decimal("1000")))
        service.save_income(Income(id=5, person="Kim", source="Pension", amount=Decimal("800")))
        service.delete_expense(2)

        assert [(e.id, e.amount) for e in service.expenses] == [(1, Decimal("1000"))]
        assert [i.id for i in service.incomes] == [3, 4, 5]
        service.delete_income(5)
        assert [i.id for i in service.incomes] == [3, 4]

    def test_cache_keeps_stored_record(self):
        source = FallbackRecordSource(
            primary=TitleCaseRecordSource(),
            fallback=InMemoryRecordSource(),
        )
        service = FinanceService(record_source=source)
        result = service.save_expense(Expense(id=1, name="rent", amount=Decimal("900")))

        assert result.data.name == "Rent"
        assert service.expenses[0].name == "Rent"

    def test_format_amount_uses_currency(self, service):
        assert service.format_amount(Decimal("-1234.5")) == "-$1,234.50"
        assert FinanceService(record_source=None, currency_symbol="€").format_amount(3) == "€3.00"

    def test_plans_use_unfiltered_records(self, service):
        service.toggle_person("Sam")
        plan_id = service.create_plan("No rent")
        service.engine.toggle_record_enabled(plan_id, "expense", 1, False)

        impact = service.plan_impact(plan_id)
        assert impact.monthly_savings == pytest.approx(1200.0)

        service.engine.toggle_plan_visibility(plan_id)
        assert [plan.id for plan, _ in service.compare_plans()] == [plan_id]

    def test_offline_dashboard(self, records, audit_storage):
        fallback = InMemoryRecordSource(**records)
        source = FallbackRecordSource(
            primary=DownRecordSource(),
            fallback=fallback,
            audit_logger=AuditLogger(audit_storage),
            retry_max_wait_seconds=0,
        )
        service = FinanceService(record_source=source)
        service.refresh()

        view = service.dashboard()
        assert view.online is False
        assert view.source == "fallback"
        assert view.error_message == "offline"
        assert len(service.expenses) == 2


class TestServiceBackups:
    """Tests for backup export and restore through the service."""

    def test_export_then_import_into_new_service(self, service):
        plan_id = service.create_plan("Lean")
        raw = service.export_backup()

        target_records = InMemoryRecordSource()
        target = FinanceService(
            record_source=FallbackRecordSource(
                primary=target_records,
                fallback=InMemoryRecordSource(),
            )
        )
        bundle = target.import_backup(raw)

        assert [e.id for e in target.expenses] == [1, 2]
        assert [i.id for i in target_records.list_incomes()] == [3, 4]
        assert target.engine.get_plan(plan_id).name == "Lean"
        assert len(bundle.plans) == 1

    def test_rejected_import_changes_nothing(self, service):
        with pytest.raises(BackupRejectedError):
            service.import_backup(json.dumps({"expenses": []}))
        assert len(service.expenses) == 2


class TestAppFactory:
    """Tests for create_app_components and settings."""

    def test_memory_backend(self, monkeypatch, clean_settings):
        monkeypatch.setenv("FINPLAN_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("FINPLAN_DEFAULT_TAX_RATE", "0.5")

        service = create_app_components()
        service.save_income(Income(id=1, source="Job", amount=Decimal("1000")))
        assert service.dashboard().totals.monthly_income == pytest.approx(500.0)

    def test_json_backend_persists(self, monkeypatch, clean_settings, tmp_path):
        monkeypatch.setenv("FINPLAN_STORAGE_BACKEND", "json")
        monkeypatch.setenv("FINPLAN_STORAGE_DATA_DIR", str(tmp_path / "data"))

        service = create_app_components(settings=Settings())
        service.save_expense(Expense(id=1, name="Rent", amount=Decimal("900")))
        plan_id = service.create_plan("Saved")

        reopened = create_app_components(settings=Settings())
        reopened.refresh()
        assert [e.id for e in reopened.expenses] == [1]
        assert reopened.engine.get_plan(plan_id) is not None
        assert (tmp_path / "data" / "financial_plans.json").exists()

    def test_currency_symbol_setting(self, monkeypatch, clean_settings):
        monkeypatch.setenv("FINPLAN_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("FINPLAN_CURRENCY_SYMBOL", "€")

        service = create_app_components()
        assert service.dashboard().currency_symbol == "€"
        assert service.format_amount(Decimal("12")) == "€12.00"

    def test_trend_months_setting(self, monkeypatch, clean_settings):
        monkeypatch.setenv("FINPLAN_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("FINPLAN_TREND_MONTHS", "3")
        assert len(create_app_components().dashboard().trend) == 3

    def test_validate_all_settings(self, monkeypatch, clean_settings):
        monkeypatch.setenv("FINPLAN_DEFAULT_TAX_RATE", "2")
        results = validate_all_settings()
        assert results["analytics"] is False
        assert "analytics_error" in results
        assert results["storage"] is True

    def test_filenames_must_be_bare(self, monkeypatch, clean_settings):
        monkeypatch.setenv("FINPLAN_STORAGE_PLANS_FILENAME", "../plans.json")
        assert validate_all_settings()["storage"] is False


class TestAuditLogger:
    """Tests for the audit logger."""

    def test_logs_to_storage(self, audit_storage):
        audit_logger = AuditLogger(audit_storage)
        plan_id = uuid4()
        audit_logger.log_plan_deleted(plan_id)
        audit_logger.log_error("boom", "something broke")

        events = audit_storage.get_recent_events()
        assert events[0].event_type == AuditEventType.SYSTEM_ERROR
        assert audit_storage.get_events_by_entity("plan", plan_id)[0].description == "Plan deleted"

    def test_storage_failure_is_reported_not_raised(self):
        audit_logger = AuditLogger(FailingAuditStorage())
        assert audit_logger.log(AuditEventBuilder.plan_deleted(uuid4())) is False

    def test_local_only(self):
        assert AuditLogger().log(AuditEventBuilder.plan_deleted(uuid4())) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
