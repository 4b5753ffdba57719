from __future__ import annotations

from collections import Counter, defaultdict
from typing import Any

from .feedback import FeedbackOut, feedback_summary


def compute_analytics(
    events: list[dict[str, Any]],
    feedback: list[FeedbackOut],
) -> dict[str, Any]:
    flows = [e for e in events if e["type"] == "flow"]
    interactions = [e for e in events if e["type"] == "interaction"]

    # Per-flow call counts and fallback rates
    calls: Counter[str] = Counter()
    fallbacks: Counter[str] = Counter()
    times: dict[str, list[float]] = defaultdict(list)
    for e in flows:
        calls[e["flow"]] += 1
        if e.get("fallback"):
            fallbacks[e["flow"]] += 1
        if "response_time_ms" in e:
            times[e["flow"]].append(e["response_time_ms"])

    flow_stats = {
        name: {
            "calls": count,
            "fallbacks": fallbacks[name],
            "fallback_rate": round(fallbacks[name] / count * 100, 1),
            "avg_response_time_ms": round(sum(times[name]) / len(times[name]), 1)
            if times[name] else 0.0,
        }
        for name, count in calls.most_common()
    }

    # Interactions by event type
    by_event = Counter(e.get("event_type", "unknown") for e in interactions)

    # Top origins / categories interacted with
    origin_counter: Counter[str] = Counter(e["origin"] for e in interactions if e.get("origin"))
    category_counter: Counter[str] = Counter(e["category"] for e in interactions if e.get("category"))

    return {
        "total_flow_calls": len(flows),
        "flows": flow_stats,
        "total_interactions": len(interactions),
        "interactions_by_type": dict(by_event),
        "top_origins": [{"name": n, "count": c} for n, c in origin_counter.most_common(10)],
        "top_categories": [{"name": n, "count": c} for n, c in category_counter.most_common(10)],
        "feedback_summary": feedback_summary(feedback),
    }
