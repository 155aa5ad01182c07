"""Scatter distributor. Splits an amount into random shares.

Pure function. The only randomness is the ``rng`` argument, so a seeded
``random.Random`` reproduces a split exactly.

Shape of the algorithm:
    1. Narrow the draw ceiling towards the mean so the first draws land
       near the target instead of overshooting it.
    2. Draw one share per slot.
    3. Repair: top up when under, clip when over, then run a few
       one-coin mixing passes so equal draws don't stay equal.
    4. Reconcile any remainder so the total is exact and every share is
       inside [minimum, maximum].
"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass
class Scattered:
    value: int


def scatter(
    amount: int,
    minimum: int,
    maximum: int,
    length: int,
    rng: random.Random | None = None,
) -> list[Scattered]:
    """Split ``amount`` into ``length`` shares in ``[minimum, maximum]``, largest first."""
    if length < 1:
        raise ValueError("length must be at least 1")
    if minimum > maximum:
        raise ValueError("minimum must not exceed maximum")
    if not minimum * length <= amount <= maximum * length:
        raise ValueError(
            f"cannot split {amount} into {length} shares between {minimum} and {maximum}"
        )
    rng = rng or random.Random()

    ceiling = maximum
    if maximum * length > amount:
        ceiling = min(maximum, round(amount / length) + length)

    shares = [Scattered(rng.randint(minimum, ceiling)) for _ in range(length)]
    total = sum(s.value for s in shares)

    if total < amount:
        _top_up(shares, amount - total, ceiling, rng)
        _mix(shares, minimum, ceiling, length, rng)
    elif total > amount:
        # Clip every share to ``length`` coins, then hand each clipped
        # share's shortfall to another share that still has room.
        for share in shares:
            share.value = min(share.value, length)
        if sum(s.value for s in shares) < amount:
            short = [s for s in shares if s.value < length]
            short_ids = {id(s) for s in short}
            for share in short:
                difference = length - share.value
                candidates = [
                    s for s in shares if id(s) not in short_ids and s.value + difference <= ceiling
                ]
                if candidates:
                    rng.choice(candidates).value += difference
        _mix(shares, minimum, ceiling, length, rng)

    _reconcile(shares, amount, minimum, maximum, rng)
    shares.sort(key=lambda s: s.value, reverse=True)
    return shares


def _top_up(shares: list[Scattered], deficit: int, ceiling: int, rng: random.Random) -> None:
    while deficit > 0:
        open_shares = [s for s in shares if s.value < ceiling]
        if not open_shares:
            return
        share = rng.choice(open_shares)
        step = rng.randint(1, min(deficit, ceiling - share.value))
        share.value += step
        deficit -= step


def _mix(
    shares: list[Scattered], minimum: int, ceiling: int, passes: int, rng: random.Random
) -> None:
    for _ in range(passes):
        donors = [s for s in shares if s.value - 1 >= minimum]
        recipients = [s for s in shares if s.value + 1 <= ceiling]
        if not donors or not recipients:
            continue
        donor = rng.choice(donors)
        recipient = rng.choice(recipients)
        donor.value -= 1
        recipient.value += 1


def _reconcile(
    shares: list[Scattered], amount: int, minimum: int, maximum: int, rng: random.Random
) -> None:
    for share in shares:
        share.value = max(minimum, min(share.value, maximum))

    difference = amount - sum(s.value for s in shares)
    order = shares[:]
    rng.shuffle(order)
    # One random pass, then a greedy pass that always finishes.
    for greedy in (False, True):
        for share in order:
            if difference == 0:
                return
            if difference > 0:
                room = min(difference, maximum - share.value)
                step = room if greedy or room == 0 else rng.randint(1, room)
                share.value += step
                difference -= step
            else:
                room = min(-difference, share.value - minimum)
                step = room if greedy or room == 0 else rng.randint(1, room)
                share.value -= step
                difference += step
