"""Memory footprints of weights and KV cache, and what the hardware offers.

Pure computation, no I/O. Values are GB (1e9 bytes) and unrounded; rounding
happens when the final result is assembled.
"""

from llmfit.quantization import QuantizationLevel, bits_per_weight
from llmfit.specs import HardwareSpec, ModelSpec

# OS and background processes keep part of a shared pool
USABLE_UNIFIED_RATIO = 0.75

DEFAULT_KV_BITS = 16

# Cross-model comparisons cap the context here so every model is sized alike
REFERENCE_CONTEXT_LENGTH = 4096


def memory_params(model: ModelSpec) -> float:
    """Parameters (billions) that must be resident in memory.

    Always the total: every expert of an MoE model is loaded even though only
    a few run per token.
    """
    return model.params


def model_memory_gb(model: ModelSpec, quantization: QuantizationLevel | str) -> float:
    """Weight memory in GB at the given quantization level."""
    bpw = bits_per_weight(quantization)
    return memory_params(model) * 1e9 * bpw / 8 / 1e9


def kv_cache_gb(model: ModelSpec, context_length: int, kv_bits: int = DEFAULT_KV_BITS) -> float:
    """KV cache memory in GB.

    ``2 × layers × kv_heads × head_dim × context × bytes_per_element``; the
    factor 2 covers the separate key and value tensors. A non-integral head
    dimension is used as-is.
    """
    bytes_per_element = kv_bits / 8
    kv_bytes = (
        2 * model.layers * model.num_kv_heads * model.head_dim * context_length * bytes_per_element
    )
    return kv_bytes / 1e9


def reference_context_length(model: ModelSpec) -> int:
    return min(model.max_context_length, REFERENCE_CONTEXT_LENGTH)


def available_accelerator_memory_gb(hardware: HardwareSpec) -> float:
    """Accelerator memory usable for the model, in GB.

    An explicit override wins over everything else. Unified memory only
    offers a fraction of the pool and never multiplies by accelerator count.
    """
    if hardware.custom_memory_override_gb is not None:
        return hardware.custom_memory_override_gb

    if hardware.is_unified_memory and hardware.accelerator is not None:
        return hardware.accelerator.memory_size_gb * USABLE_UNIFIED_RATIO

    if hardware.accelerator is not None:
        return hardware.accelerator.memory_size_gb * hardware.accelerator_count

    return 0.0


def available_host_memory_gb(hardware: HardwareSpec) -> float:
    return hardware.system_memory_gb
