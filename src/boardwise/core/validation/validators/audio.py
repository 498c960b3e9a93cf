"""Audio: ALSA sound cards."""
from __future__ import annotations

import re
from typing import List, Tuple

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

CARDS = "/proc/asound/cards"

# " 0 [vc4hdmi0       ]: vc4-hdmi - vc4-hdmi-0"
_CARD_LINE = re.compile(r"^\s*(\d+)\s+\[([^\]]+)\]:\s*(.*)$")


def parse_asound_cards(text: str) -> List[Tuple[str, str]]:
    """Return ``(id, description)`` for each card line."""
    cards: List[Tuple[str, str]] = []
    for line in text.splitlines():
        m = _CARD_LINE.match(line)
        if m:
            cards.append((m.group(2).strip(), m.group(3).strip()))
    return cards


class AudioValidator(ComponentValidator):
    name = "audio"
    resource_names = ("sound",)

    def check(self, context: ValidationContext):
        text = context.probe.read_text(CARDS)
        if text is None:
            raise ComponentFailure(f"no sound cards ({CARDS} missing)", metric=Metric("cards", 0))
        cards = parse_asound_cards(text)
        if not cards:
            raise ComponentFailure("no sound cards registered", metric=Metric("cards", 0))

        metric = Metric("cards", len(cards))
        missing = [
            want
            for want in (str(c) for c in context.setting("cards") or [])
            if not any(want == cid or want in desc for cid, desc in cards)
        ]
        if missing:
            raise ComponentFailure(f"expected sound card(s) missing: {', '.join(missing)}", metric=metric)
        return f"{len(cards)} sound card(s): {', '.join(cid for cid, _ in cards)}", metric
