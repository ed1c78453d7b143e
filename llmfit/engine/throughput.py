"""Bandwidth-bound token generation estimate."""

from llmfit.engine.rounding import round_half_up
from llmfit.specs import HardwareSpec, ModelSpec, SpeedCategory

DEFAULT_BANDWIDTH_GBPS = 50
DEFAULT_UNIFIED_BANDWIDTH_GBPS = 100

# Host-executed layers run about this many times slower
CPU_SPEED_PENALTY = 4

MIN_TOKENS_PER_SEC = 0.5
MAX_TOKENS_PER_SEC = 200


def compute_params(model: ModelSpec) -> float:
    """Parameters (billions) read per generated token.

    MoE models only run their active experts, so this is ``active_params``
    when known. Memory sizing uses the total instead (see ``memory_params``).
    """
    if model.is_moe and model.active_params:
        return model.active_params
    return model.params


def effective_bandwidth_gbps(hardware: HardwareSpec) -> float:
    accelerator = hardware.accelerator
    if accelerator is not None and accelerator.memory_bandwidth_gbps:
        return accelerator.memory_bandwidth_gbps
    if hardware.is_unified_memory:
        return DEFAULT_UNIFIED_BANDWIDTH_GBPS
    return DEFAULT_BANDWIDTH_GBPS


def estimate_tokens_per_sec(
    hardware: HardwareSpec,
    model: ModelSpec,
    layers_on_gpu: int,
    total_layers: int,
) -> float:
    """Roofline estimate: each parameter is read once per token at 2 bytes.

    Result is rounded to one decimal and clamped to [0.5, 200].
    """
    gpu_ratio = layers_on_gpu / total_layers
    base = effective_bandwidth_gbps(hardware) / (compute_params(model) * 2)
    tokens_per_sec = base * gpu_ratio + (base / CPU_SPEED_PENALTY) * (1 - gpu_ratio)
    return max(MIN_TOKENS_PER_SEC, min(MAX_TOKENS_PER_SEC, round_half_up(tokens_per_sec, 1)))


def speed_category(tokens_per_sec: float) -> SpeedCategory:
    if tokens_per_sec >= 30:
        return SpeedCategory.FAST
    if tokens_per_sec >= 10:
        return SpeedCategory.MODERATE
    if tokens_per_sec >= 3:
        return SpeedCategory.SLOW
    return SpeedCategory.VERY_SLOW
