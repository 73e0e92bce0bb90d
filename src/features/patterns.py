# src/features/patterns.py
"""
Detección de patrones de velas sobre una secuencia OHLC.

Se recorre desde el índice 2 (los patrones de 3 velas necesitan dos previas)
y cada vela `i` se compara con `i-1` (ayer) y `i-2` (anteayer). Las reglas se
evalúan de forma independiente: una misma vela puede disparar varias.

Orden de salida: velas en orden ascendente y, dentro de cada vela, el orden
de las reglas (martillo, martillo invertido, doji, envolventes, estrellas).
"""

from __future__ import annotations

from collections.abc import Sequence

from core.types import OHLCBar, Pattern

# Umbrales de las reglas
SHADOW_TO_BODY = 2.0
SMALL_SHADOW_TO_BODY = 0.3
DOJI_BODY_TO_RANGE = 0.1
STAR_BODY_TO_RANGE = 0.3

HAMMER = "Hammer (Bullish)"
HANGING_MAN = "Hanging Man (Bearish)"
INVERTED_HAMMER = "Inverted Hammer (Bullish)"
SHOOTING_STAR = "Shooting Star (Bearish)"
DOJI = "Doji (Neutral)"
BULLISH_ENGULFING = "Bullish Engulfing"
BEARISH_ENGULFING = "Bearish Engulfing"
MORNING_STAR = "Morning Star (Bullish)"
EVENING_STAR = "Evening Star (Bearish)"


# ------------------------------ Reglas de 1 vela ----------------------------


def _hammer(today: OHLCBar, i: int) -> Pattern | None:
    body = today.body
    if (
        today.lower_shadow >= SHADOW_TO_BODY * body
        and today.upper_shadow <= body * SMALL_SHADOW_TO_BODY
    ):
        bullish = today.is_bullish
        return Pattern(HAMMER if bullish else HANGING_MAN, i, bullish)
    return None


def _inverted_hammer(today: OHLCBar, i: int) -> Pattern | None:
    body = today.body
    if (
        today.upper_shadow >= SHADOW_TO_BODY * body
        and today.lower_shadow <= body * SMALL_SHADOW_TO_BODY
    ):
        bullish = today.is_bullish
        return Pattern(INVERTED_HAMMER if bullish else SHOOTING_STAR, i, bullish)
    return None


def _doji(today: OHLCBar, i: int) -> Pattern | None:
    if today.body <= today.range * DOJI_BODY_TO_RANGE:
        return Pattern(DOJI, i, False)
    return None


# ------------------------------ Reglas de 2-3 velas -------------------------


def _engulfing(today: OHLCBar, yesterday: OHLCBar, i: int) -> list[Pattern]:
    # Sin cuerpo ayer no hay nada que envolver.
    if yesterday.body <= 0:
        return []

    found: list[Pattern] = []
    if (
        today.is_bullish
        and yesterday.is_bearish
        and today.open < yesterday.close
        and today.close > yesterday.open
    ):
        found.append(Pattern(BULLISH_ENGULFING, i, True))
    if (
        today.is_bearish
        and yesterday.is_bullish
        and today.open > yesterday.close
        and today.close < yesterday.open
    ):
        found.append(Pattern(BEARISH_ENGULFING, i, False))
    return found


def _stars(today: OHLCBar, yesterday: OHLCBar, day_before: OHLCBar, i: int) -> list[Pattern]:
    small_middle = yesterday.body <= yesterday.range * STAR_BODY_TO_RANGE

    found: list[Pattern] = []
    if (
        day_before.is_bearish
        and small_middle
        and today.is_bullish
        and today.open > yesterday.close
    ):
        found.append(Pattern(MORNING_STAR, i, True))
    if (
        day_before.is_bullish
        and small_middle
        and today.is_bearish
        and today.open < yesterday.close
    ):
        found.append(Pattern(EVENING_STAR, i, False))
    return found


# ------------------------------ API pública ---------------------------------


def detect_patterns(bars: Sequence[OHLCBar]) -> list[Pattern]:
    """
    Escanea la secuencia y devuelve todos los patrones encontrados.

    Args:
        bars: velas OHLC, más antigua primero.

    Returns:
        Lista de Pattern(name, index, bullish). Vacía si hay menos de 3 velas.
    """
    patterns: list[Pattern] = []
    for i in range(2, len(bars)):
        today, yesterday, day_before = bars[i], bars[i - 1], bars[i - 2]

        for rule in (_hammer, _inverted_hammer, _doji):
            match = rule(today, i)
            if match is not None:
                patterns.append(match)

        patterns.extend(_engulfing(today, yesterday, i))
        patterns.extend(_stars(today, yesterday, day_before, i))
    return patterns


def patterns_at(patterns: Sequence[Pattern], index: int) -> list[Pattern]:
    """Patrones detectados en una vela concreta (para anotar el gráfico)."""
    return [p for p in patterns if p.index == index]


__all__ = [
    "HAMMER",
    "HANGING_MAN",
    "INVERTED_HAMMER",
    "SHOOTING_STAR",
    "DOJI",
    "BULLISH_ENGULFING",
    "BEARISH_ENGULFING",
    "MORNING_STAR",
    "EVENING_STAR",
    "detect_patterns",
    "patterns_at",
]
