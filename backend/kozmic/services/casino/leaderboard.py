from typing import Dict, Iterable, List

from kozmic.models import Player


def project(players: Iterable[Player]) -> List[Dict]:
    """Players sorted by CTOK, richest first.

    The sort is stable, so equal balances keep join order.
    """
    ranked = sorted(players, key=lambda p: p.ctok, reverse=True)
    return [
        {
            'name': p.name,
            'ctok': p.ctok,
            'enlightenment': p.enlightenment,
            'shots': p.shots,
        }
        for p in ranked
    ]
