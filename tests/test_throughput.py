"""Tests for the bandwidth-bound tokens/sec estimate."""

import pytest

from llmfit.engine.throughput import (
    MAX_TOKENS_PER_SEC,
    MIN_TOKENS_PER_SEC,
    compute_params,
    effective_bandwidth_gbps,
    estimate_tokens_per_sec,
    speed_category,
)
from llmfit.specs import AcceleratorSpec, HardwareSpec, SpeedCategory, Vendor
from tests.test_memory import LLAMA_7B, M2_MAX_64, MIXTRAL, RTX_4090

NO_BANDWIDTH_GPU = AcceleratorSpec(name="Mystery GPU", vendor=Vendor.INTEL, memory_size_gb=16)


class TestComputeParams:
    def test_dense_uses_total(self):
        assert compute_params(LLAMA_7B) == 7

    def test_moe_uses_active(self):
        assert compute_params(MIXTRAL) == 13

    def test_moe_without_active_falls_back_to_total(self):
        moe = MIXTRAL.model_copy(update={"active_params": None})
        assert compute_params(moe) == 47


class TestBandwidth:
    def test_known_bandwidth(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
        assert effective_bandwidth_gbps(hw) == 1008

    def test_unknown_bandwidth_falls_back(self):
        hw = HardwareSpec(accelerator=NO_BANDWIDTH_GPU, system_memory_gb=32)
        assert effective_bandwidth_gbps(hw) == 50

    def test_unknown_bandwidth_unified(self):
        chip = M2_MAX_64.model_copy(update={"memory_bandwidth_gbps": 0})
        hw = HardwareSpec(accelerator=chip, system_memory_gb=64, is_unified_memory=True)
        assert effective_bandwidth_gbps(hw) == 100

    def test_no_accelerator(self):
        assert effective_bandwidth_gbps(HardwareSpec(system_memory_gb=32)) == 50


class TestEstimateTokensPerSec:
    def test_all_layers_on_gpu(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
        # 1008 / (7 × 2) = 72
        assert estimate_tokens_per_sec(hw, LLAMA_7B, 32, 32) == 72.0

    def test_all_layers_on_cpu(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
        assert estimate_tokens_per_sec(hw, LLAMA_7B, 0, 32) == 18.0

    def test_mixed(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
        # 72 × 0.5 + 18 × 0.5
        assert estimate_tokens_per_sec(hw, LLAMA_7B, 16, 32) == 45.0

    def test_rounded_to_one_decimal(self):
        hw = HardwareSpec(accelerator=NO_BANDWIDTH_GPU, system_memory_gb=32)
        # 50 / 14 = 3.571...
        assert estimate_tokens_per_sec(hw, LLAMA_7B, 32, 32) == 3.6

    def test_moe_speed_follows_active_params(self):
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=64)
        dense_47b = MIXTRAL.model_copy(update={"is_moe": False, "active_params": None})
        moe = estimate_tokens_per_sec(hw, MIXTRAL, 32, 32)
        dense = estimate_tokens_per_sec(hw, dense_47b, 32, 32)
        assert moe == pytest.approx(38.8)
        assert dense == pytest.approx(10.7)

    def test_clamped_high(self):
        tiny = LLAMA_7B.model_copy(update={"params": 0.001})
        hw = HardwareSpec(accelerator=RTX_4090, system_memory_gb=32)
        assert estimate_tokens_per_sec(hw, tiny, 32, 32) == MAX_TOKENS_PER_SEC

    def test_clamped_low(self):
        huge = LLAMA_7B.model_copy(update={"params": 1000})
        hw = HardwareSpec(system_memory_gb=2048)
        assert estimate_tokens_per_sec(hw, huge, 0, 32) == MIN_TOKENS_PER_SEC

    @pytest.mark.parametrize("params", [0.001, 0.1, 1, 7, 70, 405, 10_000])
    @pytest.mark.parametrize("on_gpu", [0, 16, 32])
    def test_always_in_range(self, params, on_gpu):
        model = LLAMA_7B.model_copy(update={"params": params})
        for hw in (
            HardwareSpec(accelerator=RTX_4090, system_memory_gb=32),
            HardwareSpec(accelerator=NO_BANDWIDTH_GPU, system_memory_gb=32),
            HardwareSpec(system_memory_gb=32),
        ):
            tps = estimate_tokens_per_sec(hw, model, on_gpu, 32)
            assert MIN_TOKENS_PER_SEC <= tps <= MAX_TOKENS_PER_SEC


class TestSpeedCategory:
    @pytest.mark.parametrize(
        "tps,expected",
        [
            (200, SpeedCategory.FAST),
            (30, SpeedCategory.FAST),
            (29.9, SpeedCategory.MODERATE),
            (10, SpeedCategory.MODERATE),
            (9.9, SpeedCategory.SLOW),
            (3, SpeedCategory.SLOW),
            (2.9, SpeedCategory.VERY_SLOW),
            (0.5, SpeedCategory.VERY_SLOW),
        ],
    )
    def test_thresholds(self, tps, expected):
        assert speed_category(tps) == expected
