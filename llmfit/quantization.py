"""Quantization levels and their effective bits per weight.

The bpw values include block-scaling metadata of the GGUF k-quant formats,
which is why most sub-8-bit levels are not clean half-integers.
"""

from dataclasses import dataclass
from enum import Enum

from llmfit.errors import UnknownQuantizationError


class QuantizationLevel(str, Enum):
    FP32 = "FP32"
    FP16 = "FP16"
    Q8_0 = "Q8_0"
    Q6_K = "Q6_K"
    Q5_K_M = "Q5_K_M"
    Q5_0 = "Q5_0"
    Q4_K_M = "Q4_K_M"
    Q4_0 = "Q4_0"
    Q3_K_M = "Q3_K_M"
    Q3_K_S = "Q3_K_S"
    Q2_K = "Q2_K"


QUANTIZATION_BPW: dict[QuantizationLevel, float] = {
    QuantizationLevel.FP32: 32,
    QuantizationLevel.FP16: 16,
    QuantizationLevel.Q8_0: 8.5,
    QuantizationLevel.Q6_K: 6.57,
    QuantizationLevel.Q5_K_M: 5.69,
    QuantizationLevel.Q5_0: 5.5,
    QuantizationLevel.Q4_K_M: 4.85,
    QuantizationLevel.Q4_0: 4.5,
    QuantizationLevel.Q3_K_M: 3.91,
    QuantizationLevel.Q3_K_S: 3.5,
    QuantizationLevel.Q2_K: 3.35,
}

DEFAULT_QUANTIZATION = QuantizationLevel.Q4_K_M


@dataclass(frozen=True)
class QuantizationOption:
    level: QuantizationLevel
    label: str
    description: str

    @property
    def bits_per_weight(self) -> float:
        return QUANTIZATION_BPW[self.level]


# Largest footprint first
QUANTIZATION_OPTIONS: tuple[QuantizationOption, ...] = (
    QuantizationOption(QuantizationLevel.FP32, "FP32 (Full)", "Full precision: best quality, most memory"),
    QuantizationOption(QuantizationLevel.FP16, "FP16 (Half)", "Half precision: standard baseline"),
    QuantizationOption(QuantizationLevel.Q8_0, "Q8_0", "8-bit: near-lossless quality"),
    QuantizationOption(QuantizationLevel.Q6_K, "Q6_K", "6-bit: excellent quality"),
    QuantizationOption(QuantizationLevel.Q5_K_M, "Q5_K_M", "5-bit: very good quality"),
    QuantizationOption(QuantizationLevel.Q5_0, "Q5_0", "5-bit: good quality"),
    QuantizationOption(QuantizationLevel.Q4_K_M, "Q4_K_M ★", "4-bit: best balance of quality and size"),
    QuantizationOption(QuantizationLevel.Q4_0, "Q4_0", "4-bit: good balance"),
    QuantizationOption(QuantizationLevel.Q3_K_M, "Q3_K_M", "3-bit: noticeable quality loss"),
    QuantizationOption(QuantizationLevel.Q3_K_S, "Q3_K_S", "3-bit small: significant quality loss"),
    QuantizationOption(QuantizationLevel.Q2_K, "Q2_K", "2-bit: extreme compression, poor quality"),
)


def parse_quantization(level: QuantizationLevel | str) -> QuantizationLevel:
    """Coerce a level name to a table member.

    Raises ``UnknownQuantizationError`` for names outside the table; there is
    no fallback bpw.
    """
    if isinstance(level, QuantizationLevel):
        return level
    try:
        return QuantizationLevel(level)
    except ValueError:
        raise UnknownQuantizationError(str(level)) from None


def bits_per_weight(level: QuantizationLevel | str) -> float:
    return QUANTIZATION_BPW[parse_quantization(level)]
