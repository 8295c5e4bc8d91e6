from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Dict, Hashable, List, NamedTuple, Tuple

from cottagetrip.core.errors import ValidationError


class Transfer(NamedTuple):
    from_user_id: Hashable
    to_user_id: Hashable
    amount_cents: int


def _is_cents(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def compute_equal_splits(total_cents: int, member_ids: Sequence[Hashable]) -> List[Tuple[Hashable, int]]:
    """Split ``total_cents`` equally across ``member_ids``.

    The first ``total_cents % n`` members (in the given order) absorb one extra
    cent each, so the shares always add up to the total and never differ by
    more than a cent. Callers pass members in a stable order (membership
    insertion order) so the extra cents land on the same people every time.
    """
    if not _is_cents(total_cents):
        raise ValidationError("Amount must be an integer number of cents")
    if total_cents < 0:
        raise ValidationError("Amount cannot be negative")

    members = list(member_ids)
    if not members:
        raise ValidationError("No members selected")
    if len(members) != len(set(members)):
        raise ValidationError("Duplicate users found in splits")

    base, remainder = divmod(total_cents, len(members))

    return [
        (uid, base + 1 if i < remainder else base)
        for i, uid in enumerate(members)
    ]


def validate_splits(amount_cents: int, splits: Sequence[Tuple[Hashable, int]]) -> None:
    if not _is_cents(amount_cents):
        raise ValidationError("Amount must be an integer number of cents")
    if amount_cents < 0:
        raise ValidationError("Amount cannot be negative")

    if not splits:
        raise ValidationError("No members selected")

    user_ids = [uid for uid, _ in splits]
    if len(user_ids) != len(set(user_ids)):
        raise ValidationError("Duplicate users found in splits")

    if any(not _is_cents(share) or share < 0 for _, share in splits):
        raise ValidationError("Split amounts must be non-negative integer cents")

    total = sum(share for _, share in splits)
    if total != amount_cents:
        raise ValidationError("Splits must sum to expense amount")


def _field(obj: Any, name: str):
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def _split_pair(split: Any) -> Tuple[Hashable, int]:
    if isinstance(split, (tuple, list)):
        uid, amount = split
        return uid, amount
    return _field(split, "user_id"), _field(split, "amount_cents")


def compute_net_balances(expenses: Iterable[Any]) -> Dict[Hashable, int]:
    """Net position per member across ``expenses``.

    Positive means the member owes money, negative means they are owed.
    Expenses may be ORM rows or mappings with ``paid_by_user_id``,
    ``amount_cents`` and ``splits``; splits may be rows, mappings or
    ``(user_id, amount_cents)`` pairs.
    """
    net: Dict[Hashable, int] = {}

    for exp in expenses:
        payer = _field(exp, "paid_by_user_id")
        net[payer] = net.get(payer, 0) - _field(exp, "amount_cents")

        for split in _field(exp, "splits"):
            uid, amount = _split_pair(split)
            net[uid] = net.get(uid, 0) + amount

    # amounts are already integer cents, keep the map strictly int
    return {uid: int(round(amount)) for uid, amount in net.items()}


def compute_settlements(net_map: Dict[Hashable, int]) -> List[Transfer]:
    """Reduce net balances to a list of pairwise transfers.

    Greedy: the largest remaining debtor pays the largest remaining creditor.
    Always balances and terminates, but the transfer count is not guaranteed
    to be minimal.
    """
    debtors = []
    creditors = []

    for uid, bal in net_map.items():
        if bal > 0:
            debtors.append([uid, bal])
        elif bal < 0:
            creditors.append([uid, -bal])

    # list.sort is stable, equal amounts keep insertion order
    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    debtors = deque(debtors)
    creditors = deque(creditors)

    transfers: List[Transfer] = []

    while creditors and debtors:
        debt_id, debt_amt = debtors.popleft()
        cred_id, cred_amt = creditors.popleft()

        pay_amt = min(debt_amt, cred_amt)

        if pay_amt > 0 and debt_id != cred_id:
            transfers.append(Transfer(debt_id, cred_id, pay_amt))

        if debt_amt - pay_amt > 0:
            debtors.appendleft([debt_id, debt_amt - pay_amt])
        if cred_amt - pay_amt > 0:
            creditors.appendleft([cred_id, cred_amt - pay_amt])

    return transfers
