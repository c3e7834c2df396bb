from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Optional, Union


@dataclass(frozen=True, slots=True)
class CashPayment:
    amount: Decimal

    method = "Cash"

    def __post_init__(self) -> None:
        # Plain ints and floats are accepted; str() keeps 5.1 from becoming 5.0999...
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))


@dataclass(frozen=True, slots=True)
class CardPayment:
    number: str
    pin: str

    method = "Card"


@dataclass(frozen=True, slots=True)
class WalletPayment:
    identifier: str

    method = "Wallet"


PaymentMethod = Union[CashPayment, CardPayment, WalletPayment]


@dataclass(frozen=True, slots=True)
class PaymentResult:
    approved: bool
    message: str
    change: Optional[Decimal] = None


def _money(value: Decimal) -> str:
    return f"${value.quantize(Decimal('0.01'))}"


def _authorize_cash(price: Decimal, payment: CashPayment) -> PaymentResult:
    if payment.amount >= price:
        return PaymentResult(
            approved=True,
            message=f"Payment of {_money(price)} accepted via Cash.",
            change=(payment.amount - price).quantize(Decimal("0.01")),
        )
    return PaymentResult(
        approved=False,
        message=f"Insufficient cash. Required: {_money(price)}, Inserted: {_money(payment.amount)}",
    )


def _authorize_card(price: Decimal, payment: CardPayment) -> PaymentResult:
    if len(payment.number) >= 16 and len(payment.pin) == 4:
        return PaymentResult(
            approved=True,
            message=f"Payment of {_money(price)} accepted via Card (**** {payment.number[-4:]}).",
        )
    return PaymentResult(approved=False, message="Card payment failed. Invalid card or PIN.")


def _authorize_wallet(price: Decimal, payment: WalletPayment) -> PaymentResult:
    if "@" in payment.identifier:
        return PaymentResult(
            approved=True,
            message=f"Payment of {_money(price)} accepted via Wallet ({payment.identifier}).",
        )
    return PaymentResult(approved=False, message="Wallet payment failed. Invalid wallet ID.")


_AUTHORIZERS: Dict[type, Callable[[Decimal, PaymentMethod], PaymentResult]] = {
    CashPayment: _authorize_cash,
    CardPayment: _authorize_card,
    WalletPayment: _authorize_wallet,
}


def authorize(price: Decimal, payment: PaymentMethod) -> PaymentResult:
    """Validate a tendered payment against the price. No side effects, no retries."""
    handler = _AUTHORIZERS.get(type(payment))
    if handler is None:
        raise ValueError(f"Unsupported payment method: {payment!r}")
    return handler(price, payment)


def build_payment(method: str, **params: str) -> PaymentMethod:
    """Build a payment variant from a method name and its raw parameters."""
    name = method.strip().lower()
    if name == "cash":
        try:
            return CashPayment(amount=Decimal(str(params["amount"])))
        except (KeyError, InvalidOperation) as e:
            raise ValueError(f"Cash payment needs a numeric amount: {e}") from e
    if name == "card":
        return CardPayment(number=str(params.get("number", "")), pin=str(params.get("pin", "")))
    if name in ("wallet", "upi"):
        return WalletPayment(identifier=str(params.get("identifier", "")))
    raise ValueError(f"Unknown payment method: {method}")
