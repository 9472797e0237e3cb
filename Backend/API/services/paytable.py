from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from fractions import Fraction
from functools import lru_cache
from typing import Optional

from services.errors import InvalidParameter
from services.rng import check_risk, check_rows

# Exponent applied to the fair-odds multiplier 1/p. 1.0 is the unskewed
# reference table; below flattens toward the centre, above pushes value to the edges.
SKEW = {"low": 0.5, "medium": 1.0, "high": 1.5}

PAYOUT_QUANTUM = Decimal("0.00000001")
# bets are Decimal(max_digits=38, decimal_places=8) at the API
MAX_BET_INTEGER_DIGITS = 30
PAYOUT_PRECISION = 80


def binomial_row(n: int) -> list:
    """C(n, 0..n) in exact integers."""
    row = [1]
    c = 1
    for k in range(1, n + 1):
        c = c * (n - k + 1) // k
        row.append(c)
    return row


def _probabilities(n: int) -> list:
    total = 2 ** n
    return [Fraction(c, total) for c in binomial_row(n)]


def bucket_probabilities(rows: int) -> tuple:
    return tuple(float(p) for p in _probabilities(check_rows(rows)))


@lru_cache(maxsize=None)
def _table(rows: int, risk: str) -> tuple:
    probs = _probabilities(rows)
    base = [1 / p for p in probs]
    gamma = SKEW[risk]
    raw = base if gamma == 1 else [float(b) ** gamma for b in base]
    ev = sum(p * r for p, r in zip(probs, raw))
    factor = 1 / ev
    return tuple(float(r * factor) for r in raw)


def build_table(rows: int, risk: Optional[str] = None) -> tuple:
    """Multipliers per bucket whose binomial-weighted mean is exactly 1."""
    return _table(check_rows(rows), check_risk(risk))


def multiplier_for(rows: int, risk: Optional[str], bucket: int) -> float:
    return build_table(rows, risk)[bucket]


def check_bet_amount(bet_amount) -> Decimal:
    try:
        amount = Decimal(str(bet_amount))
    except InvalidOperation:
        raise InvalidParameter("bet amount must be a number") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidParameter("bet amount must be a positive number")
    if amount.adjusted() >= MAX_BET_INTEGER_DIGITS:
        raise InvalidParameter(f"bet amount must have at most {MAX_BET_INTEGER_DIGITS} integer digits")
    return amount


def payout_for(bet_amount, multiplier: float) -> Decimal:
    amount = check_bet_amount(bet_amount)
    # wide enough that a 38-digit bet times any table entry is exact before truncation
    with localcontext() as ctx:
        ctx.prec = PAYOUT_PRECISION
        return (amount * Decimal(repr(multiplier))).quantize(PAYOUT_QUANTUM, rounding=ROUND_DOWN)
