"""Score normalization and multi-provider aggregation on the PTE 0-90 scale."""

import math
from typing import Any, Iterable, Mapping, Optional

PTE_MIN = 0
PTE_MAX = 90

# Subscores reported on their own scale (0-100 percentages, raw counts)
AUXILIARY_METRICS = frozenset(
    {"transcript_accuracy", "prosody_score", "coherence_score", "cohesion_score", "word_count"}
)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))


def clamp_to_range(value: Any, low: float, high: float) -> float:
    number = _to_float(value)
    if number is None:
        return float(low)
    return max(float(low), min(float(high), number))


def clamp_to_90(value: Any) -> int:
    """
    Clamp any score-like value into the PTE range [0, 90].

    None, NaN and non-numeric input become 0; numbers are rounded half-up
    before clamping, so 89.5 -> 90 and -3 -> 0.
    """
    number = _to_float(value)
    if number is None:
        return PTE_MIN
    if math.isinf(number):
        return PTE_MAX if number > 0 else PTE_MIN
    return max(PTE_MIN, min(PTE_MAX, _round_half_up(number)))


def scale_to_90(earned: float, possible: float) -> int:
    """Scale an objective earned/possible ratio onto 0-90."""
    if not possible or possible <= 0:
        return 0
    return clamp_to_90(PTE_MAX * max(0.0, float(earned)) / float(possible))


def weighted_overall(subscores: Mapping[str, Any], weights: Mapping[str, float]) -> int:
    """
    Weighted mean of the subscores that have a weight.

    Weights are renormalized over the keys actually present, so a provider
    that omits one criterion is not penalized for it.
    """
    total_weight = 0.0
    acc = 0.0
    for key, weight in weights.items():
        number = _to_float(subscores.get(key))
        if number is None or weight <= 0:
            continue
        acc += clamp_to_90(number) * weight
        total_weight += weight
    if total_weight == 0:
        return 0
    return clamp_to_90(acc / total_weight)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def aggregate_provider_scores(
    results: Iterable[Mapping[str, Any]],
    weights: Optional[Mapping[str, float]] = None,
) -> dict:
    """
    Combine raw results from several providers into one score.

    Each numeric subscore is averaged over the providers that reported it.
    The overall is the mean of provider overalls; when ``weights`` is given a
    provider that omitted its overall contributes the weighted mean of its
    subscores instead. Non-numeric subscores (labels, notes) keep the first
    value seen. Key points and strategies from the providers are merged in order;
    ``meta.provider`` names the provider whose rationale was kept.
    """
    results = [r for r in results if r is not None]
    if not results:
        raise ValueError("No provider results to aggregate")

    overalls: list[float] = []
    numeric: dict[str, list[float]] = {}
    extra: dict[str, Any] = {}
    suggestions: list[str] = []
    providers: list[str] = []
    notes: dict[str, list[str]] = {"key_points": [], "strategies": []}

    for result in results:
        subscores = result.get("subscores") or {}
        overall = _to_float(result.get("overall"))
        if overall is None and weights:
            if any(_to_float(subscores.get(k)) is not None for k in weights):
                overall = float(weighted_overall(subscores, weights))
        if overall is not None:
            overalls.append(overall)

        for key, value in subscores.items():
            number = _to_float(value)
            if number is None:
                extra.setdefault(key, value)
            else:
                numeric.setdefault(key, []).append(number)

        for suggestion in result.get("suggestions") or []:
            if suggestion and suggestion not in suggestions:
                suggestions.append(suggestion)

        meta = result.get("meta") or {}
        if meta.get("provider"):
            providers.append(meta["provider"])
        for key, items in notes.items():
            for item in meta.get(key) or []:
                if item and item not in items:
                    items.append(item)

    merged_subscores = {
        key: round(_mean(vals), 1) if key in AUXILIARY_METRICS else clamp_to_90(_mean(vals))
        for key, vals in numeric.items()
    }
    for key, value in extra.items():
        merged_subscores.setdefault(key, value)

    source = next((r for r in results if r.get("rationale")), None)
    rationale = source["rationale"] if source else ""
    clamped_overalls = [clamp_to_90(v) for v in overalls]

    return {
        "overall": clamp_to_90(_mean(overalls)) if overalls else None,
        "subscores": merged_subscores,
        "rationale": rationale,
        "suggestions": suggestions,
        "meta": {
            "providers": providers,
            "provider_count": len(results),
            "agreement": (max(clamped_overalls) - min(clamped_overalls)) if clamped_overalls else None,
            "strategy": "consensus",
            "provider": (source.get("meta") or {}).get("provider") if source else None,
            **{key: items for key, items in notes.items() if items},
        },
    }
