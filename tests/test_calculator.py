"""End-to-end compatibility scenarios, quick checks and model comparison."""

import pytest

from llmfit.engine.calculator import calculate_compatibility, compare_models, quick_check
from llmfit.engine.memory import kv_cache_gb, model_memory_gb
from llmfit.engine.offload import total_required_gb
from llmfit.errors import UnknownQuantizationError
from llmfit.quantization import QuantizationLevel
from llmfit.specs import (
    HardwareSpec,
    RecommendationType,
    SpeedCategory,
    Verdict,
)
from tests.test_memory import LLAMA_7B, M2_MAX_64, MIXTRAL, RTX_4060_TI_8GB, RTX_4090

RTX_4090_BOX = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
RTX_4060_TI_BOX = HardwareSpec(accelerator=RTX_4060_TI_8GB, system_memory_gb=16)
M2_MAX_BOX = HardwareSpec.for_accelerator(M2_MAX_64, system_memory_gb=16)


class TestFullGpu:
    def test_llama_7b_fp16_on_4090(self):
        result = calculate_compatibility(LLAMA_7B, RTX_4090_BOX, QuantizationLevel.FP16, 4096)

        assert result.verdict == Verdict.FULL_GPU
        assert result.verdict_label == "Full GPU"
        assert result.verdict_emoji == "✅"
        assert result.model_memory_gb == 14.0
        assert result.kv_cache_memory_gb == 2.15
        assert result.system_overhead_gb == 0.5
        assert result.total_required_gb == 16.65
        assert result.available_vram_gb == 24
        assert result.available_ram_gb == 32
        assert (result.layers_on_gpu, result.layers_on_cpu) == (32, 0)
        assert result.offload_percentage == 0
        assert result.estimated_tokens_per_sec == 72.0
        assert result.speed_category == SpeedCategory.FAST
        assert result.recommendations == []

    def test_q4_at_4096_fits_8gb(self):
        result = calculate_compatibility(LLAMA_7B, RTX_4060_TI_BOX, "Q4_K_M", 4096)
        assert result.verdict == Verdict.FULL_GPU
        assert result.total_required_gb == 6.89


class TestPartialOffload:
    def test_llama_7b_q4_long_context_on_8gb(self):
        result = calculate_compatibility(LLAMA_7B, RTX_4060_TI_BOX, QuantizationLevel.Q4_K_M, 8192)

        assert result.verdict == Verdict.PARTIAL_OFFLOAD
        assert result.verdict_emoji == "⚡"
        assert result.model_memory_gb == 4.24
        assert result.kv_cache_memory_gb == 4.29
        assert result.total_required_gb == 9.04
        assert result.layers_on_gpu == 28
        assert result.layers_on_cpu == 4
        # 12.5% rounds half up
        assert result.offload_percentage == 13
        assert result.estimated_tokens_per_sec == 18.6
        assert result.speed_category == SpeedCategory.MODERATE

    def test_recommendations(self):
        result = calculate_compatibility(LLAMA_7B, RTX_4060_TI_BOX, QuantizationLevel.Q4_K_M, 8192)
        types = [r.type for r in result.recommendations]
        # Already at Q4_K_M, so no quantization advice
        assert types == [RecommendationType.CONTEXT, RecommendationType.TIP]
        assert result.recommendations[0].description == (
            "Reducing from 8,192 to 4,096 tokens saves ~2.1GB of KV cache."
        )
        assert result.recommendations[1].title == "CPU offloading active"

    def test_moe_sized_by_total_and_timed_by_active(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=64)
        result = calculate_compatibility(MIXTRAL, hw, QuantizationLevel.Q4_K_M, 4096)

        assert result.model_memory_gb == pytest.approx(28.49)
        assert result.total_required_gb == pytest.approx(29.53)
        assert result.verdict == Verdict.PARTIAL_OFFLOAD
        assert result.layers_on_gpu == 25
        assert result.offload_percentage == 22
        assert result.estimated_tokens_per_sec == 32.4
        assert result.speed_category == SpeedCategory.FAST


class TestCpuOnly:
    def test_tiny_vram_override_places_no_layers(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32, custom_memory_override_gb=0.3)
        result = calculate_compatibility(LLAMA_7B, hw, QuantizationLevel.FP16, 4096)

        assert result.verdict == Verdict.CPU_ONLY
        assert result.verdict_emoji == "🐢"
        assert result.available_vram_gb == 0.3
        assert (result.layers_on_gpu, result.layers_on_cpu) == (0, 32)
        assert result.offload_percentage == 100
        assert result.estimated_tokens_per_sec == 18.0
        assert len(result.recommendations) == 1
        rec = result.recommendations[0]
        assert rec.type == RecommendationType.QUANTIZATION
        assert "~6.4GB" in rec.description

    def test_no_accelerator(self):
        hw = HardwareSpec(system_memory_gb=32)
        result = calculate_compatibility(LLAMA_7B, hw, QuantizationLevel.Q4_K_M, 4096)

        assert result.verdict == Verdict.CPU_ONLY
        assert result.available_vram_gb == 0
        assert result.layers_on_gpu == 0
        # 50 GB/s default / 14 / 4
        assert result.estimated_tokens_per_sec == 0.9
        assert result.speed_category == SpeedCategory.VERY_SLOW


class TestCannotRun:
    def test_not_enough_memory_anywhere(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=8, custom_memory_override_gb=0.3)
        result = calculate_compatibility(LLAMA_7B, hw, QuantizationLevel.FP16, 4096)

        assert result.verdict == Verdict.CANNOT_RUN
        assert result.verdict_label == "Cannot Run"
        types = [r.type for r in result.recommendations]
        assert types == [RecommendationType.MODEL, RecommendationType.QUANTIZATION]
        assert result.recommendations[0].description == (
            "This model requires 16.6GB but you only have 8.3GB total. Consider a smaller model."
        )


class TestUnifiedMemory:
    def test_m2_max(self):
        result = calculate_compatibility(LLAMA_7B, M2_MAX_BOX, QuantizationLevel.Q4_K_M, 4096)

        assert result.verdict == Verdict.FULL_GPU
        assert result.available_vram_gb == 48
        assert result.available_ram_gb == 64
        assert result.estimated_tokens_per_sec == 28.6
        assert [r.title for r in result.recommendations] == ["Unified memory"]
        assert result.recommendations[0].description == (
            "Your M2 Max (64GB) uses unified memory. "
            "~75% of total RAM is usable for ML inference."
        )


class TestCalculationContract:
    def test_deterministic(self):
        a = calculate_compatibility(MIXTRAL, RTX_4060_TI_BOX, "Q5_K_M", 16384)
        b = calculate_compatibility(MIXTRAL, RTX_4060_TI_BOX, "Q5_K_M", 16384)
        assert a == b

    @pytest.mark.parametrize("quant", list(QuantizationLevel))
    @pytest.mark.parametrize("ctx", [512, 4096, 32768])
    def test_layers_and_speed_invariants(self, quant, ctx):
        for hw in (RTX_4090_BOX, RTX_4060_TI_BOX, M2_MAX_BOX, HardwareSpec(system_memory_gb=8)):
            result = calculate_compatibility(MIXTRAL, hw, quant, ctx)
            assert result.layers_on_gpu + result.layers_on_cpu == result.total_layers
            assert 0 <= result.offload_percentage <= 100
            assert 0.5 <= result.estimated_tokens_per_sec <= 200
            if result.verdict == Verdict.PARTIAL_OFFLOAD:
                assert result.layers_on_gpu > 0
            if result.verdict == Verdict.FULL_GPU:
                assert result.layers_on_cpu == 0

    @pytest.mark.parametrize("quant", list(QuantizationLevel))
    @pytest.mark.parametrize("ctx", [512, 2048, 4096, 8192])
    def test_exact_fit_keeps_every_layer(self, quant, ctx):
        """VRAM equal to the requirement is a full fit with nothing offloaded."""
        required = total_required_gb(model_memory_gb(LLAMA_7B, quant), kv_cache_gb(LLAMA_7B, ctx))
        hw = HardwareSpec(
            accelerator=RTX_4090, system_memory_gb=32, custom_memory_override_gb=required
        )
        result = calculate_compatibility(LLAMA_7B, hw, quant, ctx)
        assert result.verdict == Verdict.FULL_GPU
        assert (result.layers_on_gpu, result.layers_on_cpu) == (32, 0)
        assert result.offload_percentage == 0

    @pytest.mark.parametrize("ctx", [0, -1])
    def test_context_must_be_positive(self, ctx):
        with pytest.raises(ValueError):
            calculate_compatibility(LLAMA_7B, RTX_4090_BOX, "Q4_K_M", ctx)

    def test_unknown_quantization(self):
        with pytest.raises(UnknownQuantizationError):
            calculate_compatibility(LLAMA_7B, RTX_4090_BOX, "Q1_XS", 4096)


class TestQuickCheck:
    def test_uses_reference_context(self):
        """Mixtral's native 32k context is not charged; the cache is sized at 4096."""
        check = quick_check(MIXTRAL, RTX_4090_BOX, QuantizationLevel.Q4_K_M)
        assert check.vram_needed_gb == pytest.approx(29.53)

    def test_matches_full_calculation_at_reference_context(self):
        check = quick_check(LLAMA_7B, RTX_4060_TI_BOX, QuantizationLevel.Q4_K_M)
        full = calculate_compatibility(LLAMA_7B, RTX_4060_TI_BOX, QuantizationLevel.Q4_K_M, 4096)
        assert check.verdict == full.verdict
        assert check.vram_needed_gb == full.total_required_gb

    def test_no_partial_without_gpu_layers(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32, custom_memory_override_gb=0.3)
        check = quick_check(LLAMA_7B, hw, QuantizationLevel.FP16)
        assert check.verdict == Verdict.CPU_ONLY


class TestCompareModels:
    def test_sorted_by_verdict_then_memory(self):
        tiny = LLAMA_7B.model_copy(update={"id": "tiny", "params": 1})
        mid = LLAMA_7B.model_copy(update={"id": "mid", "params": 13})

        rows = compare_models([MIXTRAL, mid, LLAMA_7B, tiny], RTX_4060_TI_BOX, "Q4_K_M")

        assert [r.model.id for r in rows] == ["tiny", "llama-2-7b", "mid", "mixtral-8x7b"]
        assert [r.verdict for r in rows] == [
            Verdict.FULL_GPU,
            Verdict.FULL_GPU,
            Verdict.PARTIAL_OFFLOAD,
            Verdict.CANNOT_RUN,
        ]
        assert rows[0].vram_needed_gb < rows[1].vram_needed_gb

    def test_empty(self):
        assert compare_models([], RTX_4090_BOX, "Q4_K_M") == []
