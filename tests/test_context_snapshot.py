"""Financial snapshot used as assistant context and by the dashboard."""

from datetime import date
from decimal import Decimal

import pytest

from app.services.context_snapshot import ContextSnapshotBuilder

TODAY = date(2026, 10, 19)


@pytest.fixture
async def ledger(executor, categories):
    """A month of activity plus one goal and one debt in progress."""
    rows = [
        (2000, "Nomina octubre", "income", "Nomina", "2026-10-01"),
        (250, "Compra grande", "expense", "Supermercado", "2026-10-04"),
        (150, "Compra semanal", "expense", "Supermercado", "2026-10-11"),
        (200, "Concierto", "expense", "Ocio", "2026-10-15"),
        (100, "Hucha", "savings", "Ahorro", "2026-10-16"),
        (1500, "Nomina septiembre", "income", "Nomina", "2026-09-01"),
        (90, "Cena", "expense", "Restaurantes", "2026-09-20"),
    ]
    for amount, concept, kind, category, day in rows:
        result = await executor.create_transaction(amount, concept, kind, categories[category].id, day)
        assert result.success, result.error

    goal = await executor.create_goal("Casa", 1000)
    await executor.contribute_to_goal(250, goal_id=goal.data["goal"]["id"])
    done = await executor.create_goal("Bici", 100)
    await executor.contribute_to_goal(100, goal_id=done.data["goal"]["id"])

    debt = await executor.create_debt("Prestamo", 500, interest_rate="6.5")
    await executor.pay_debt(100, debt_id=debt.data["debt"]["id"])
    return executor


async def test_current_month_totals(db, user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, user).build(today=TODAY)

    month = snapshot.current_month
    assert (month.start, month.end) == (date(2026, 10, 1), date(2026, 10, 31))
    assert month.income == Decimal("2000")
    assert month.expenses == Decimal("600")
    assert month.savings == Decimal("100")
    assert month.balance == Decimal("1400")
    assert month.savings_rate == 70
    assert month.days_remaining == 12
    assert month.daily_budget == Decimal("116.67")


async def test_category_spend_counts_only_expenses(db, user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, user).build(today=TODAY)

    spend = [(row.name, row.total, row.operation_count) for row in snapshot.category_spend]
    assert spend == [("Supermercado", Decimal("400"), 2), ("Ocio", Decimal("200"), 1)]


async def test_open_goals_and_debts_with_progress(db, user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, user).build(today=TODAY)

    assert [(g.name, g.progress, g.status.value) for g in snapshot.goals] == [("Casa", 25, "active")]
    assert [(d.name, d.progress, d.current_balance) for d in snapshot.debts] == [
        ("Prestamo", 20, Decimal("400"))
    ]


async def test_recent_operations_carry_ids_newest_first(db, user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, user, recent_limit=3).build(today=TODAY)

    recent = snapshot.recent_operations
    assert [op.concept for op in recent] == ["Hucha", "Concierto", "Compra semanal"]
    assert all(op.id for op in recent)
    assert recent[1].category == "Ocio"


async def test_trend_covers_six_months(db, user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, user).build(today=TODAY)

    trend = snapshot.monthly_trend
    assert [m.month for m in trend] == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
    assert (trend[-2].income, trend[-2].expenses) == (Decimal("1500"), Decimal("90"))
    assert trend[0].income == Decimal("0")


async def test_profile_and_categories(db, user) -> None:
    snapshot = await ContextSnapshotBuilder(db, user).build(today=TODAY)

    assert snapshot.profile.name == "Ana"
    assert snapshot.profile.rule == "50/30/20"
    assert {c.name for c in snapshot.categories} >= {"Nomina", "Supermercado", "Ahorro"}
    assert snapshot.goals == [] and snapshot.debts == [] and snapshot.recent_operations == []
    assert snapshot.current_month.savings_rate == 0


async def test_snapshot_is_scoped_to_the_user(db, other_user, ledger) -> None:
    snapshot = await ContextSnapshotBuilder(db, other_user).build(today=TODAY)

    assert snapshot.current_month.income == Decimal("0")
    assert snapshot.goals == []
    assert snapshot.recent_operations == []


async def test_building_twice_gives_the_same_view(db, user, ledger) -> None:
    builder = ContextSnapshotBuilder(db, user)
    assert await builder.build(today=TODAY) == await builder.build(today=TODAY)
