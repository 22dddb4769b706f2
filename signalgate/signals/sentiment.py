"""Sentiment source: optional external opinion with a price-action fallback.

The fallback is deterministic: the average of the last ten closes against
the ten before gives the trend, the close-to-close change over the last
five bars gives the momentum. Trend and momentum pointing the same way
yields BULLISH / BEARISH at 70, anything else NEUTRAL at 50.

An external opinion, when one arrives within the timeout, is blended in:
agreement boosts confidence, disagreement lets the more confident view win.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Optional

import numpy as np
import pandas as pd

from signalgate.errors import InvariantViolation
from signalgate.labels import Label, clamp_confidence
from signalgate.market.bars import require_bars
from signalgate.market.protocols import ExternalSentiment, SentimentContext, SentimentProvider
from .types import SignalSource

log = logging.getLogger(__name__)

SOURCE_NAME = "sentiment"

TREND_WINDOW = 10
MOMENTUM_BARS = 5
STRONG_MOMENTUM = 0.02
MILD_MOMENTUM = 0.005
ALIGNED_CONFIDENCE = 70.0
MIXED_CONFIDENCE = 50.0
MAX_BLENDED_CONFIDENCE = 95.0


def _trend(closes: pd.Series) -> Label:
    recent = closes.iloc[-TREND_WINDOW:].mean()
    older = closes.iloc[-2 * TREND_WINDOW:-TREND_WINDOW].mean()
    if recent > older:
        return Label.BULLISH
    if recent < older:
        return Label.BEARISH
    return Label.NEUTRAL


def _momentum(closes: pd.Series) -> tuple[str, float]:
    current = closes.iloc[-1]
    previous = closes.iloc[-MOMENTUM_BARS]
    roc = (current - previous) / previous if previous else 0.0

    if roc > STRONG_MOMENTUM:
        return "STRONG_BULLISH", roc
    if roc > MILD_MOMENTUM:
        return "BULLISH", roc
    if roc < -STRONG_MOMENTUM:
        return "STRONG_BEARISH", roc
    if roc < -MILD_MOMENTUM:
        return "BEARISH", roc
    return "NEUTRAL", roc


def price_action_sentiment(ohlcv: pd.DataFrame) -> tuple[Label, float, dict]:
    """Deterministic sentiment from closes alone.

    Returns ``(label, confidence, details)``.

    Raises
    ------
    InsufficientDataError
        Fewer than 20 bars.
    """
    require_bars(ohlcv, 2 * TREND_WINDOW, "price-action sentiment")
    closes = ohlcv["close"].astype(np.float64)

    trend = _trend(closes)
    momentum, roc = _momentum(closes)

    if trend is Label.BULLISH and momentum.endswith("BULLISH"):
        label, confidence = Label.BULLISH, ALIGNED_CONFIDENCE
    elif trend is Label.BEARISH and momentum.endswith("BEARISH"):
        label, confidence = Label.BEARISH, ALIGNED_CONFIDENCE
    else:
        label, confidence = Label.NEUTRAL, MIXED_CONFIDENCE

    return label, confidence, {"trend": trend.value, "momentum": momentum, "roc": float(roc)}


def blend_sentiment(
    fallback_label: Label,
    fallback_confidence: float,
    external: Optional[ExternalSentiment],
    boost: float = 5.0,
) -> tuple[Label, float, str]:
    """Combine the fallback view with an external opinion.

    The result is never less confident than the fallback alone. Returns
    ``(label, confidence, origin)`` where origin is ``"fallback"``,
    ``"blended"`` or ``"external"``.
    """
    if external is None:
        return fallback_label, fallback_confidence, "fallback"

    if external.label is fallback_label:
        boosted = min(MAX_BLENDED_CONFIDENCE, max(fallback_confidence, external.confidence) + boost)
        return fallback_label, clamp_confidence(max(fallback_confidence, boosted)), "blended"

    if external.confidence > fallback_confidence:
        return external.label, clamp_confidence(external.confidence), "external"
    return fallback_label, fallback_confidence, "fallback"


def build_context(ohlcv: pd.DataFrame, symbol: str, timeframe: str, details: dict) -> SentimentContext:
    """Summarise the window for an external provider."""
    closes = ohlcv["close"].astype(np.float64)
    volumes = ohlcv["volume"].astype(np.float64)
    returns = closes.pct_change().dropna()

    avg_volume = volumes.iloc[-TREND_WINDOW:].mean()
    return SentimentContext(
        symbol=symbol,
        timeframe=timeframe,
        last_close=float(closes.iloc[-1]),
        change_pct=float((closes.iloc[-1] / closes.iloc[0] - 1.0) * 100.0),
        trend=Label(details["trend"]),
        momentum=details["momentum"],
        volatility=float(np.sqrt((returns ** 2).mean())) if len(returns) else 0.0,
        volume_ratio=float(volumes.iloc[-1] / avg_volume) if avg_volume else 1.0,
    )


class SentimentSource:
    """Sentiment voter.

    Parameters
    ----------
    provider : SentimentProvider, optional
        External opinion. ``None`` runs the price-action fallback only.
    timeout_seconds : float
        Upper bound on the provider call; a slower answer is discarded.
    ai_confidence_boost : float
        Added to the confidence when both views agree (result capped at 95).
    weight : float
        Declared weight of the emitted source.
    """

    def __init__(
        self,
        provider: Optional[SentimentProvider] = None,
        timeout_seconds: float = 5.0,
        ai_confidence_boost: float = 5.0,
        weight: float = 1.0,
    ) -> None:
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        self.ai_confidence_boost = ai_confidence_boost
        self.weight = weight

    def evaluate(self, ohlcv: pd.DataFrame, symbol: str = "", timeframe: str = "") -> SignalSource:
        label, confidence, details = price_action_sentiment(ohlcv)

        external = None
        if self.provider is not None:
            external = self._fetch_external(build_context(ohlcv, symbol, timeframe, details))

        label, confidence, origin = blend_sentiment(
            label, confidence, external, self.ai_confidence_boost,
        )

        metadata = dict(details, origin=origin)
        if external is not None:
            metadata["external"] = {
                "label": external.label.value,
                "confidence": external.confidence,
                "source": external.source,
            }

        return SignalSource(
            source_name=SOURCE_NAME,
            label=label,
            confidence=confidence,
            weight=self.weight,
            metadata=metadata,
        )

    def _fetch_external(self, context: SentimentContext) -> Optional[ExternalSentiment]:
        """Call the provider under the timeout; failures yield ``None``."""
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self.provider.get_external_sentiment, context)
            result = future.result(timeout=self.timeout_seconds)
        except concurrent.futures.TimeoutError:
            log.warning(
                "Sentiment provider timed out after %.1fs; using price-action fallback",
                self.timeout_seconds,
            )
            return None
        except InvariantViolation:
            raise
        except Exception as exc:
            log.warning("Sentiment provider failed (%s); using price-action fallback", exc)
            return None
        finally:
            # a hung provider thread is abandoned, not joined
            executor.shutdown(wait=False)

        if result is not None and not isinstance(result, ExternalSentiment):
            raise InvariantViolation(
                f"sentiment provider returned {type(result).__name__}, expected ExternalSentiment"
            )
        return result
