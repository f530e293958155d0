"""
File-size based print estimate.

This is a heuristic, not a geometric analysis: the mesh is never parsed.
Weight follows a piecewise-linear model over the file size in megabytes,
print time is derived from weight and size, cost from weight.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

BYTES_PER_MB = 1024 * 1024
COST_PER_GRAM = Decimal("0.25")
MIN_PRINT_MINUTES = 30

_CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize to two decimal places, half-up."""
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ModelEstimate:
    weight_grams: Decimal
    print_time: str
    base_cost: Decimal


def estimate_weight(size_mb: float) -> float:
    if size_mb < 1:
        return max(5.0, size_mb * 20)
    if size_mb < 5:
        return 20 + (size_mb - 1) * 15
    return 80 + (size_mb - 5) * 10


def format_print_time(minutes: float) -> str:
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours}h {mins}m"


def estimate(file_size_bytes: int) -> ModelEstimate:
    if file_size_bytes <= 0:
        raise ValueError(f"File size must be positive, got {file_size_bytes}")

    size_mb = file_size_bytes / BYTES_PER_MB
    weight = estimate_weight(size_mb)
    minutes = max(MIN_PRINT_MINUTES, weight * 1.5 + size_mb * 20)

    weight_grams = to_money(weight)
    return ModelEstimate(
        weight_grams=weight_grams,
        print_time=format_print_time(minutes),
        base_cost=to_money(weight_grams * COST_PER_GRAM),
    )
