"""Compatibility entry points: full calculation, quick check, comparison table.

Every function here is a pure function of its arguments. Calling twice with
the same inputs returns equal results.
"""

import logging
from collections.abc import Iterable

from llmfit.engine.memory import (
    available_accelerator_memory_gb,
    available_host_memory_gb,
    kv_cache_gb,
    model_memory_gb,
    reference_context_length,
)
from llmfit.engine.offload import (
    FRAMEWORK_OVERHEAD_GB,
    VERDICT_ORDER,
    classify_verdict,
    plan_layers,
    total_required_gb,
)
from llmfit.engine.recommendations import generate_recommendations
from llmfit.engine.rounding import round_half_up
from llmfit.engine.throughput import estimate_tokens_per_sec, speed_category
from llmfit.quantization import QuantizationLevel, parse_quantization
from llmfit.specs import (
    CalculationResult,
    ComparisonRow,
    HardwareSpec,
    ModelSpec,
    QuickCheckResult,
)

logger = logging.getLogger(__name__)


def calculate_compatibility(
    model: ModelSpec,
    hardware: HardwareSpec,
    quantization: QuantizationLevel | str,
    context_length: int,
) -> CalculationResult:
    """Estimate how *model* runs on *hardware*.

    Callers are expected to have a model with at least one layer (enforced by
    ``ModelSpec``) and normally a selected accelerator; without one, every
    layer lands on the host.

    Raises:
        UnknownQuantizationError: If *quantization* is not in the table.
        ValueError: If *context_length* is not a positive integer.
    """
    if context_length <= 0:
        raise ValueError(f"context_length must be positive, got {context_length}")
    quantization = parse_quantization(quantization)

    model_gb = model_memory_gb(model, quantization)
    kv_gb = kv_cache_gb(model, context_length)
    required_gb = total_required_gb(model_gb, kv_gb)

    vram_gb = available_accelerator_memory_gb(hardware)
    ram_gb = available_host_memory_gb(hardware)

    plan = plan_layers(model.layers, model_gb, kv_gb, vram_gb)
    verdict = classify_verdict(required_gb, vram_gb, ram_gb, plan.on_gpu)

    tokens_per_sec = estimate_tokens_per_sec(hardware, model, plan.on_gpu, plan.total_layers)

    recommendations = generate_recommendations(
        model, hardware, quantization, verdict, context_length, required_gb, vram_gb
    )

    logger.debug(
        "%s @ %s ctx=%d: need %.2fGB, vram=%.2fGB ram=%.2fGB, gpu layers %d/%d -> %s",
        model.id,
        quantization.value,
        context_length,
        required_gb,
        vram_gb,
        ram_gb,
        plan.on_gpu,
        plan.total_layers,
        verdict.value,
    )

    return CalculationResult(
        verdict=verdict,
        verdict_label=verdict.label,
        verdict_emoji=verdict.emoji,
        model_memory_gb=round_half_up(model_gb, 2),
        kv_cache_memory_gb=round_half_up(kv_gb, 2),
        system_overhead_gb=FRAMEWORK_OVERHEAD_GB,
        total_required_gb=round_half_up(required_gb, 2),
        available_vram_gb=round_half_up(vram_gb, 2),
        available_ram_gb=ram_gb,
        total_layers=plan.total_layers,
        layers_on_gpu=plan.on_gpu,
        layers_on_cpu=plan.on_cpu,
        offload_percentage=int(round_half_up(plan.offload_percentage)),
        estimated_tokens_per_sec=tokens_per_sec,
        speed_category=speed_category(tokens_per_sec),
        recommendations=recommendations,
    )


def quick_check(
    model: ModelSpec,
    hardware: HardwareSpec,
    quantization: QuantizationLevel | str,
) -> QuickCheckResult:
    """Cheap verdict for comparison tables.

    Sizes the KV cache at ``min(max_context_length, 4096)`` so models with huge
    native contexts are not penalized, then applies the same verdict ladder as
    ``calculate_compatibility``.
    """
    model_gb = model_memory_gb(model, quantization)
    kv_gb = kv_cache_gb(model, reference_context_length(model))
    required_gb = total_required_gb(model_gb, kv_gb)

    vram_gb = available_accelerator_memory_gb(hardware)
    ram_gb = available_host_memory_gb(hardware)
    plan = plan_layers(model.layers, model_gb, kv_gb, vram_gb)

    return QuickCheckResult(
        verdict=classify_verdict(required_gb, vram_gb, ram_gb, plan.on_gpu),
        vram_needed_gb=round_half_up(required_gb, 2),
    )


def compare_models(
    models: Iterable[ModelSpec],
    hardware: HardwareSpec,
    quantization: QuantizationLevel | str,
) -> list[ComparisonRow]:
    """Quick-check every model, best verdict first, then smallest footprint."""
    rows = []
    for model in models:
        check = quick_check(model, hardware, quantization)
        rows.append(
            ComparisonRow(model=model, verdict=check.verdict, vram_needed_gb=check.vram_needed_gb)
        )
    rows.sort(key=lambda r: (VERDICT_ORDER[r.verdict], r.vram_needed_gb))
    return rows
