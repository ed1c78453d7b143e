"""Rule-based advice attached to a calculation result.

Rules are checked in a fixed order and each one appends independently, so
several recommendations can apply at once.
"""

from llmfit.engine.memory import (
    REFERENCE_CONTEXT_LENGTH,
    USABLE_UNIFIED_RATIO,
    kv_cache_gb,
    model_memory_gb,
)
from llmfit.quantization import QuantizationLevel
from llmfit.specs import (
    HardwareSpec,
    Impact,
    ModelSpec,
    Recommendation,
    RecommendationType,
    Verdict,
)

# Already aggressive enough that suggesting Q4_K_M makes no sense
AGGRESSIVE_QUANTIZATIONS = frozenset(
    {QuantizationLevel.Q4_K_M, QuantizationLevel.Q3_K_M, QuantizationLevel.Q2_K}
)

MIN_CONTEXT_SAVINGS_GB = 0.5


def generate_recommendations(
    model: ModelSpec,
    hardware: HardwareSpec,
    quantization: QuantizationLevel,
    verdict: Verdict,
    context_length: int,
    total_required_gb: float,
    available_vram_gb: float,
) -> list[Recommendation]:
    recs: list[Recommendation] = []

    if verdict == Verdict.CANNOT_RUN:
        combined = available_vram_gb + hardware.system_memory_gb
        recs.append(
            Recommendation(
                type=RecommendationType.MODEL,
                title="Try a smaller model",
                description=(
                    f"This model requires {total_required_gb:.1f}GB but you only have "
                    f"{combined:.1f}GB total. Consider a smaller model."
                ),
                impact=Impact.HIGH,
            )
        )

    if verdict != Verdict.FULL_GPU and quantization not in AGGRESSIVE_QUANTIZATIONS:
        q4_memory = model_memory_gb(model, QuantizationLevel.Q4_K_M) + kv_cache_gb(
            model, context_length
        )
        recs.append(
            Recommendation(
                type=RecommendationType.QUANTIZATION,
                title="Use Q4_K_M quantization",
                description=(
                    f"Switching to Q4_K_M would reduce memory to ~{q4_memory:.1f}GB "
                    f"with minimal quality loss."
                ),
                impact=Impact.HIGH,
            )
        )

    if context_length > REFERENCE_CONTEXT_LENGTH and verdict != Verdict.FULL_GPU:
        savings = kv_cache_gb(model, context_length) - kv_cache_gb(model, REFERENCE_CONTEXT_LENGTH)
        if savings > MIN_CONTEXT_SAVINGS_GB:
            recs.append(
                Recommendation(
                    type=RecommendationType.CONTEXT,
                    title="Reduce context length",
                    description=(
                        f"Reducing from {context_length:,} to {REFERENCE_CONTEXT_LENGTH:,} "
                        f"tokens saves ~{savings:.1f}GB of KV cache."
                    ),
                    impact=Impact.MEDIUM,
                )
            )

    if verdict == Verdict.PARTIAL_OFFLOAD:
        recs.append(
            Recommendation(
                type=RecommendationType.TIP,
                title="CPU offloading active",
                description=(
                    "Some model layers will run on CPU, which is slower. "
                    "Consider a GPU with more VRAM for full speed."
                ),
                impact=Impact.MEDIUM,
            )
        )

    if hardware.is_unified_memory:
        chip = hardware.accelerator.name if hardware.accelerator else "system"
        recs.append(
            Recommendation(
                type=RecommendationType.TIP,
                title="Unified memory",
                description=(
                    f"Your {chip} uses unified memory. "
                    f"~{USABLE_UNIFIED_RATIO * 100:.0f}% of total RAM is usable for ML inference."
                ),
                impact=Impact.LOW,
            )
        )

    return recs
