"""Prometheus metrics for the dialog engine.

Tracks turn outcomes, how far the repair cascade had to go, contract
violations, side-effect failures and model latency.
"""

from prometheus_client import Counter, Histogram

TURNS_PROCESSED = Counter(
    "factfinder_turns_processed_total",
    "Total number of dialog turns processed",
    labelnames=["step_type", "outcome"],
)

REPAIR_STAGE = Counter(
    "factfinder_repair_stage_total",
    "Repair cascade stage that produced the parsed response",
    labelnames=["stage"],
)

CONTRACT_VIOLATIONS = Counter(
    "factfinder_contract_violations_total",
    "Model responses missing the completion flag",
    labelnames=["step_type"],
)

SIDE_EFFECT_FAILURES = Counter(
    "factfinder_side_effect_failures_total",
    "Best-effort transcript writes that failed",
    labelnames=["kind"],
)

MODEL_LATENCY = Histogram(
    "factfinder_model_latency_seconds",
    "Latency of the model call for a dialog turn",
    labelnames=["step_type"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

COMPLETION_PERCENTAGE = Histogram(
    "factfinder_completion_percentage",
    "Computed completion percentage after each turn",
    labelnames=["step_type"],
    buckets=(0, 10, 25, 40, 50, 60, 70, 80, 90, 100),
)
