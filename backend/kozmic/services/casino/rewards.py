"""Slot symbols, reward evaluation and symbol sources.

`evaluate` is a pure lookup over a three-symbol draw. Randomness lives only
in the symbol sources, which are injected so tests can replay fixed draws.
"""

import random
from typing import Iterable, Iterator, Sequence, Tuple

GUITAR = '🎸'
PIANO = '🎹'
POTATO = '🥔'
STAR = '🌟'
ROBOT = '🤖'
LLAMA = '🦙'
HOLE = '🕳️'
BRAIN = '🧠'

COSMIC_SYMBOLS: Tuple[str, ...] = (GUITAR, PIANO, POTATO, STAR, ROBOT, LLAMA, HOLE, BRAIN)
DRAW_SIZE = 3

TRIPLE_BASE_REWARD = 1000
TRIPLE_REWARDS = {
    POTATO: (2000, '🥔 TRIPLE POTATO ENLIGHTENMENT! +2000 CTOK!'),
    ROBOT: (3000, '🤖 MACHINE CONSCIOUSNESS ACHIEVED! +3000 CTOK!'),
    BRAIN: (5000, '🧠 ULTIMATE BRAIN JACKPOT! +5000 CTOK!'),
}
# Checked in order; the first symbol present pays, bonuses never stack
BONUS_REWARDS = (
    (ROBOT, 100, '🤖 MACHINE CONSCIOUSNESS BONUS! +100 CTOK!'),
    (BRAIN, 50, '🧠 BRAIN POWER BONUS! +50 CTOK + WISDOM!'),
)
CONSOLATION_REWARD = 25
CONSOLATION_MESSAGE = 'Close call! +25 CTOK consolation'

ENLIGHTENMENT_GAINS = {BRAIN: 10, ROBOT: 5}


def evaluate(results: Sequence[str]) -> Tuple[int, str]:
    """Return (reward, message) for a three-symbol draw.

    Triple match beats the bonus symbols, which beat the consolation prize.
    """
    if len(results) != DRAW_SIZE:
        raise ValueError(f'a draw has exactly {DRAW_SIZE} symbols, got {len(results)}')
    first = results[0]
    if all(r == first for r in results):
        if first in TRIPLE_REWARDS:
            return TRIPLE_REWARDS[first]
        return TRIPLE_BASE_REWARD, f'✨ TRIPLE {first}! Cosmic alignment! +{TRIPLE_BASE_REWARD} CTOK!'

    for symbol, reward, message in BONUS_REWARDS:
        if symbol in results:
            return reward, message

    return CONSOLATION_REWARD, CONSOLATION_MESSAGE


def enlightenment_gain(results: Iterable[str]) -> int:
    """Enlightenment earned from a draw, keyed only on which symbols appear."""
    present = set(results)
    return sum(gain for symbol, gain in ENLIGHTENMENT_GAINS.items() if symbol in present)


class RandomSymbolSource:
    """Uniform, independent draws from the symbol alphabet."""

    def __init__(self, rng: random.Random = None, symbols: Sequence[str] = COSMIC_SYMBOLS):
        self._rng = rng or random.SystemRandom()
        self._symbols = tuple(symbols)

    def draw(self, count: int = DRAW_SIZE) -> Tuple[str, ...]:
        return tuple(self._rng.choice(self._symbols) for _ in range(count))


class SequenceSymbolSource:
    """Replays pre-arranged draws in order; used to script spins in tests."""

    def __init__(self, draws: Iterable[Sequence[str]]):
        self._draws: Iterator[Sequence[str]] = iter(draws)

    def draw(self, count: int = DRAW_SIZE) -> Tuple[str, ...]:
        try:
            results = tuple(next(self._draws))
        except StopIteration:
            raise RuntimeError('symbol sequence exhausted') from None
        if len(results) != count:
            raise ValueError(f'scripted draw has {len(results)} symbols, expected {count}')
        return results
