"""
Tests for Payment Service.

Tests wallet payments and refunds including:
- Points pricing with currency conversion
- Refund when the transaction cannot be recorded
- Marking the promoted poll paid
"""

import pytest
from fastapi import HTTPException

from app.modules.payments.schemas import TransactionCreate, TransactionStatusUpdate, WalletPaymentRequest
from app.modules.payments.service import PaymentService


@pytest.fixture
def payer(profile_factory):
    return profile_factory("payer-1", points=2000)


@pytest.fixture
def promotion(fake_db, payer):
    sponsor = fake_db.seed("sponsors", {"user_id": payer["id"], "name": "Payer Co", "is_active": True})[0]
    return fake_db.seed("promoted_polls", {
        "poll_id": "poll-1",
        "sponsor_id": sponsor["id"],
        "budget_amount": 10,
        "cost_per_vote": 0.05,
        "target_votes": 200,
        "status": "pending_approval",
        "payment_status": "pending",
    })[0]


@pytest.mark.unit
class TestWalletPayment:
    def test_pays_in_points(self, fake_db, payer) -> None:
        transaction = PaymentService(fake_db).process_wallet_payment(payer["id"], WalletPaymentRequest(amount=12.5))

        assert transaction.status == "completed"
        assert transaction.payment_method == "wallet"
        assert transaction.metadata["points_used"] == 1250
        assert fake_db.row("profiles", id=payer["id"])["points"] == 750

    def test_amount_converted_to_profile_currency(self, fake_db, profile_factory) -> None:
        payer = profile_factory("payer-eu", points=2000, currency="EUR")
        fake_db.seed("currency_exchange_rates", {"from_currency": "USD", "to_currency": "EUR", "rate": 0.9})

        transaction = PaymentService(fake_db).process_wallet_payment(payer["id"], WalletPaymentRequest(amount=10))
        assert transaction.metadata["points_used"] == 900
        assert transaction.original_amount == 9
        assert transaction.original_currency == "EUR"

    def test_insufficient_points(self, fake_db, payer) -> None:
        with pytest.raises(HTTPException) as exc:
            PaymentService(fake_db).process_wallet_payment(payer["id"], WalletPaymentRequest(amount=25))
        assert exc.value.detail == "Insufficient points. You need 2500 points (2000 available)."

    def test_failed_record_refunds(self, fake_db, payer) -> None:
        fake_db.fail_tables["transactions"] = "insert"
        with pytest.raises(HTTPException) as exc:
            PaymentService(fake_db).process_wallet_payment(payer["id"], WalletPaymentRequest(amount=5))
        assert exc.value.status_code == 500
        assert fake_db.row("profiles", id=payer["id"])["points"] == 2000

    def test_marks_promotion_paid(self, fake_db, payer, promotion) -> None:
        service = PaymentService(fake_db)
        service.process_wallet_payment(payer["id"], WalletPaymentRequest(amount=10, promoted_poll_id=promotion["id"]))
        assert fake_db.row("promoted_polls", id=promotion["id"])["payment_status"] == "paid"

        with pytest.raises(HTTPException) as exc:
            service.process_wallet_payment(payer["id"], WalletPaymentRequest(amount=10, promoted_poll_id=promotion["id"]))
        assert exc.value.detail == "Payment has already been processed for this promoted poll"

    def test_only_sponsor_owner_pays(self, fake_db, user, promotion) -> None:
        with pytest.raises(HTTPException) as exc:
            PaymentService(fake_db).process_wallet_payment(
                user["id"], WalletPaymentRequest(amount=10, promoted_poll_id=promotion["id"])
            )
        assert exc.value.status_code == 403


@pytest.mark.unit
class TestTransactions:
    def test_refund_promoted_poll(self, fake_db, payer, promotion) -> None:
        service = PaymentService(fake_db)
        service.process_wallet_payment(payer["id"], WalletPaymentRequest(amount=10, promoted_poll_id=promotion["id"]))

        assert service.refund_promoted_poll(promotion["id"]) == 1000
        assert fake_db.row("profiles", id=payer["id"])["points"] == 2000
        assert service.refund_promoted_poll(promotion["id"]) == 0

    def test_gateway_transaction_lifecycle(self, fake_db, payer) -> None:
        service = PaymentService(fake_db)
        created = service.create_transaction(payer["id"], TransactionCreate(amount=20, payment_method="stripe"))
        assert created.status == "pending"

        updated = service.update_transaction_status(
            created.id, TransactionStatusUpdate(status="completed", gateway_transaction_id="pi_123")
        )
        assert updated.status == "completed"
        assert updated.gateway_transaction_id == "pi_123"

        listing = service.list_transactions(user_id=payer["id"], status="completed")
        assert listing.total == 1

    def test_update_unknown_transaction(self, fake_db) -> None:
        with pytest.raises(HTTPException) as exc:
            PaymentService(fake_db).update_transaction_status("missing", TransactionStatusUpdate(status="failed"))
        assert exc.value.status_code == 404
