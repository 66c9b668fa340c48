"""Error kinds raised while turning rolls into chat card data."""

from __future__ import annotations


class MalformedRollInput(ValueError):
    """Raised when a roll handed to a processor cannot be decomposed.

    Fatal for the single field being rendered; callers assembling a card
    should skip or report that field rather than abort the card.
    """


class TooltipGenerationFailure(RuntimeError):
    """Raised when the tooltip service fails for any roll of a render call."""
