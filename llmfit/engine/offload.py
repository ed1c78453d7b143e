"""Layer placement between accelerator and host, and the fit verdict."""

import math
from dataclasses import dataclass

from llmfit.specs import Verdict

# CUDA / Metal / ROCm runtime reservation, counted once per machine
FRAMEWORK_OVERHEAD_GB = 0.5

VERDICT_ORDER: dict[Verdict, int] = {
    Verdict.FULL_GPU: 0,
    Verdict.PARTIAL_OFFLOAD: 1,
    Verdict.CPU_ONLY: 2,
    Verdict.CANNOT_RUN: 3,
}


@dataclass(frozen=True)
class LayerPlan:
    total_layers: int
    on_gpu: int
    on_cpu: int

    @property
    def offload_percentage(self) -> float:
        return self.on_cpu / self.total_layers * 100


def total_required_gb(model_memory_gb: float, kv_cache_gb: float) -> float:
    return model_memory_gb + kv_cache_gb + FRAMEWORK_OVERHEAD_GB


def plan_layers(
    total_layers: int,
    model_memory_gb: float,
    kv_cache_gb: float,
    available_vram_gb: float,
) -> LayerPlan:
    """Decide how many transformer layers fit in accelerator memory.

    Every layer is charged the same share of weights plus KV cache. Embedding
    and output layers really cost more or less than a mid-network block, but
    verdict boundaries depend on the uniform split.
    """
    if available_vram_gb <= FRAMEWORK_OVERHEAD_GB:
        return LayerPlan(total_layers=total_layers, on_gpu=0, on_cpu=total_layers)

    # Same test as the full-GPU verdict
    if total_required_gb(model_memory_gb, kv_cache_gb) <= available_vram_gb:
        return LayerPlan(total_layers=total_layers, on_gpu=total_layers, on_cpu=0)

    budget = available_vram_gb - FRAMEWORK_OVERHEAD_GB
    per_layer = (model_memory_gb + kv_cache_gb) / total_layers
    on_gpu = min(total_layers, math.floor(budget / per_layer))
    return LayerPlan(total_layers=total_layers, on_gpu=on_gpu, on_cpu=total_layers - on_gpu)


def classify_verdict(
    total_required_gb: float,
    available_vram_gb: float,
    available_ram_gb: float,
    layers_on_gpu: int,
) -> Verdict:
    """Pick the first verdict whose guard holds.

    Partial offload needs at least one layer on the accelerator. A setup that
    fits in VRAM + RAM combined but places no layers on the accelerator falls
    through to the host-only check.
    """
    if total_required_gb <= available_vram_gb:
        return Verdict.FULL_GPU

    if total_required_gb <= available_vram_gb + available_ram_gb and layers_on_gpu > 0:
        return Verdict.PARTIAL_OFFLOAD

    if total_required_gb <= available_ram_gb:
        return Verdict.CPU_ONLY

    return Verdict.CANNOT_RUN
