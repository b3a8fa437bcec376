"""Debt ledger: derived balance, paid status and manual settlement."""

import uuid
from datetime import date
from decimal import Decimal

from app.core.errors import InvalidAmount, InvalidTransition
from app.crud.debt import get_debt_by_id, sum_payments
from app.models.debt import DebtStatus
from app.services.debt_aggregate import DebtAggregate, derive_debt_balance, derive_debt_status
from app.utils.dates import utcnow


async def _new_debt(executor, name="Car loan", original="500"):
    result = await executor.create_debt(name, original, interest_rate="4.5", debt_type="car_loan")
    assert result.success, result.error
    return uuid.UUID(result.data["debt"]["id"])


def test_balance_is_clamped_to_the_original_amount() -> None:
    assert derive_debt_balance(Decimal("500"), Decimal("200"), False) == Decimal("300")
    assert derive_debt_balance(Decimal("500"), Decimal("800"), False) == Decimal("0")
    assert derive_debt_balance(Decimal("500"), Decimal("-50"), False) == Decimal("500")
    assert derive_debt_balance(Decimal("500"), Decimal("0"), True) == Decimal("0")


def test_status_follows_the_balance() -> None:
    now = utcnow()
    assert derive_debt_status(DebtStatus.active, Decimal("0"), False, None, now) == (DebtStatus.paid, now)
    assert derive_debt_status(DebtStatus.paid, Decimal("10"), False, now, now) == (DebtStatus.active, None)
    assert derive_debt_status(DebtStatus.paused, Decimal("10"), False, None, now) == (DebtStatus.paused, None)


async def test_new_debt_starts_with_full_balance(executor) -> None:
    result = await executor.create_debt("Credit card", "1200.50", creditor="Bank", start_date="2026-01-15")

    debt = result.data["debt"]
    assert result.success
    assert debt["current_balance"] == 1200.5
    assert debt["original_amount"] == 1200.5
    assert debt["status"] == "active"
    assert debt["debt_type"] == "other"
    assert debt["start_date"] == "2026-01-15"


async def test_create_debt_defaults_start_date_to_today(executor) -> None:
    result = await executor.create_debt("Phone", "300")
    assert result.data["debt"]["start_date"] == date.today().isoformat()


async def test_full_payment_marks_paid_and_revision_reopens(db, user, executor) -> None:
    """Pay 500 of a 500 debt, then revise that payment down to 300."""
    debt_id = await _new_debt(executor)

    paid = await executor.pay_debt(500, debt_id=debt_id)
    assert paid.success
    assert paid.data["debt"]["current_balance"] == 0
    assert paid.data["debt"]["status"] == "paid"
    assert paid.data["debt"]["paid_at"] is not None

    revised = await executor.revise_payment(paid.data["payment"]["id"], amount=300)
    assert revised.success
    assert revised.data["debt"]["current_balance"] == 200
    assert revised.data["debt"]["status"] == "active"
    assert revised.data["debt"]["paid_at"] is None
    assert await sum_payments(debt_id, user.id, db) == Decimal("300")


async def test_overpayment_clamps_balance_at_zero(executor) -> None:
    debt_id = await _new_debt(executor)
    await executor.pay_debt(200, debt_id=debt_id)

    result = await executor.pay_debt(450, debt_id=debt_id)

    assert result.success
    assert result.data["debt"]["current_balance"] == 0
    assert result.data["debt"]["status"] == "paid"


async def test_paying_a_paid_debt_is_refused(executor) -> None:
    debt_id = await _new_debt(executor)
    await executor.pay_debt(500, debt_id=debt_id)

    result = await executor.pay_debt(10, debt_id=debt_id)

    assert not result.success
    assert result.code == InvalidTransition.code
    assert result.http_status == 409


async def test_removing_a_payment_restores_the_balance(executor) -> None:
    debt_id = await _new_debt(executor)
    first = await executor.pay_debt(150, debt_id=debt_id)
    await executor.pay_debt(100, debt_id=debt_id)

    result = await executor.remove_payment(first.data["payment"]["id"])

    assert result.data["debt"]["current_balance"] == 400


async def test_invalid_payment_amount(executor) -> None:
    debt_id = await _new_debt(executor)

    for amount in (0, -1, "ten", "1e30", "10000000000"):
        result = await executor.pay_debt(amount, debt_id=debt_id)
        assert result.code == InvalidAmount.code


async def test_mark_paid_and_reopen(executor) -> None:
    """A debt settled outside the ledger reports no balance until reopened."""
    debt_id = await _new_debt(executor)
    await executor.pay_debt(120, debt_id=debt_id)

    settled = await executor.force_pay_debt(debt_id)
    assert settled.data["debt"]["status"] == "paid"
    assert settled.data["debt"]["force_paid"] is True
    assert settled.data["debt"]["current_balance"] == 0

    reopened = await executor.reopen_debt(debt_id)
    assert reopened.data["debt"]["status"] == "active"
    assert reopened.data["debt"]["current_balance"] == 380

    again = await executor.reopen_debt(debt_id)
    assert again.code == InvalidTransition.code


async def test_pause_rules(executor) -> None:
    debt_id = await _new_debt(executor)

    assert (await executor.set_debt_paused(debt_id, True)).data["debt"]["status"] == "paused"
    assert (await executor.set_debt_paused(debt_id, False)).data["debt"]["status"] == "active"

    await executor.pay_debt(500, debt_id=debt_id)
    assert (await executor.set_debt_paused(debt_id, True)).code == InvalidTransition.code


async def test_raising_original_amount_reopens_paid_debt(executor) -> None:
    debt_id = await _new_debt(executor)
    await executor.pay_debt(500, debt_id=debt_id)

    result = await executor.update_debt(debt_id, original_amount="800", creditor="Dealer")

    assert result.data["debt"]["current_balance"] == 300
    assert result.data["debt"]["status"] == "active"
    assert result.data["debt"]["creditor"] == "Dealer"


async def test_update_debt_validation(executor) -> None:
    debt_id = await _new_debt(executor)

    assert (await executor.update_debt(debt_id, current_balance=0)).code == "validation_error"
    assert (await executor.update_debt(debt_id, interest_rate="-1")).code == "validation_error"
    assert (await executor.update_debt(debt_id, original_amount=0)).code == InvalidAmount.code


async def test_recompute_repairs_balance(db, user, executor) -> None:
    debt_id = await _new_debt(executor)
    await executor.pay_debt(100, debt_id=debt_id)

    debt = await get_debt_by_id(debt_id, user.id, db)
    debt.current_balance = Decimal("1")
    await db.commit()

    aggregate = DebtAggregate(db, user.id)
    assert await aggregate.recompute(debt_id) == (Decimal("400"), DebtStatus.active)
    await db.commit()

    result = await executor.recompute_debt(debt_id)
    assert result.data["debt"]["current_balance"] == 400


async def test_delete_debt(db, user, executor) -> None:
    debt_id = await _new_debt(executor)
    await executor.pay_debt(100, debt_id=debt_id)

    result = await executor.delete_debt(debt_id)

    assert result.data["deleted"]["name"] == "Car loan"
    assert await get_debt_by_id(debt_id, user.id, db) is None
    assert await sum_payments(debt_id, user.id, db) == Decimal("0")


async def test_rates_and_amounts_must_fit_their_columns(executor) -> None:
    assert (await executor.create_debt("Tarjeta", "1e30")).code == InvalidAmount.code
    assert (await executor.create_debt("Tarjeta", 500, interest_rate=1000)).code == "validation_error"
    assert (await executor.create_debt("Tarjeta", 500, interest_rate="999.999")).code == "validation_error"
    assert (await executor.create_debt("Tarjeta", 500, monthly_payment="1e30")).code == "validation_error"

    created = await executor.create_debt("Tarjeta", 500, interest_rate="24.99")
    assert created.data["debt"]["interest_rate"] == 24.99

    debt_id = created.data["debt"]["id"]
    assert (await executor.update_debt(debt_id, interest_rate=5000)).code == "validation_error"
    assert (await executor.update_debt(debt_id, original_amount="1e30")).code == InvalidAmount.code
