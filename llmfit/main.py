"""CLI entry point: check one model, compare the seed catalog, list GPUs."""

import argparse
import json
import logging
import sys

from llmfit.config import GPU_CACHE_TTL_SECONDS, MODEL_CACHE_TTL_SECONDS
from llmfit.data.seed_models import SEED_MODELS, get_seed_model
from llmfit.data.unified_memory import UNIFIED_MEMORY_PRESETS, find_preset
from llmfit.engine.calculator import calculate_compatibility, compare_models
from llmfit.errors import AcceleratorNotFoundError, ModelNotFoundError
from llmfit.quantization import DEFAULT_QUANTIZATION, QUANTIZATION_OPTIONS, QuantizationLevel
from llmfit.sources.cache import default_cache
from llmfit.sources.gpu_catalog import (
    fetch_accelerators,
    find_accelerator,
    group_by_vendor,
    search_accelerators,
)
from llmfit.sources.huggingface import fetch_model_spec, search_models
from llmfit.specs import HardwareSpec, ModelSpec, Vendor, Verdict

logger = logging.getLogger(__name__)

CONTEXT_PRESETS = [2048, 4096, 8192, 16384, 32768, 65536, 131072]


def resolve_model(model_id: str) -> ModelSpec:
    """Seed catalog first, then the Hub."""
    model = get_seed_model(model_id)
    if model is not None:
        return model

    if "/" in model_id:
        cache = default_cache("models", MODEL_CACHE_TTL_SECONDS)
        model = fetch_model_spec(model_id, cache=cache)
        if model is not None:
            return model

    raise ModelNotFoundError(model_id)


def load_catalog(offline: bool = False):
    """Accelerator catalog; *offline* skips the network and uses presets only."""
    if offline:
        return list(UNIFIED_MEMORY_PRESETS)
    return fetch_accelerators(cache=default_cache("gpus", GPU_CACHE_TTL_SECONDS))


def build_hardware(args: argparse.Namespace) -> HardwareSpec:
    """Hardware from --gpu/--gpu-count/--ram/--vram; no --gpu means CPU only."""
    if args.gpu is None:
        return HardwareSpec(
            system_memory_gb=args.ram,
            custom_memory_override_gb=args.vram,
        )

    # Apple presets resolve without touching the network
    accelerator = find_preset(args.gpu) or find_accelerator(
        load_catalog(offline=args.offline), args.gpu
    )
    if accelerator is None:
        raise AcceleratorNotFoundError(args.gpu)

    logger.info("Using accelerator %s (%.0fGB)", accelerator.name, accelerator.memory_size_gb)
    return HardwareSpec.for_accelerator(
        accelerator,
        system_memory_gb=args.ram,
        accelerator_count=args.gpu_count,
        custom_memory_override_gb=args.vram,
    )


def run_check(args: argparse.Namespace) -> dict:
    model = resolve_model(args.model)
    hardware = build_hardware(args)
    result = calculate_compatibility(model, hardware, args.quant, args.context)
    logger.info(
        "%s on %s: %s %s",
        model.name,
        hardware.accelerator.name if hardware.accelerator else "CPU",
        result.verdict_emoji,
        result.verdict_label,
    )
    return {"model": model.model_dump(mode="json"), "result": result.model_dump(mode="json")}


def run_compare(args: argparse.Namespace) -> dict:
    hardware = build_hardware(args)
    rows = compare_models(SEED_MODELS, hardware, args.quant)
    return {
        "runnable": sum(1 for r in rows if r.verdict == Verdict.FULL_GPU),
        "partial": sum(1 for r in rows if r.verdict == Verdict.PARTIAL_OFFLOAD),
        "models": [
            {
                "id": r.model.id,
                "name": r.model.name,
                "params_b": r.model.params,
                "is_moe": r.model.is_moe,
                "vram_needed_gb": r.vram_needed_gb,
                "verdict": r.verdict.value,
                "verdict_label": r.verdict.label,
            }
            for r in rows
        ],
    }


def run_gpus(args: argparse.Namespace) -> dict:
    gpus = search_accelerators(load_catalog(offline=args.offline), args.search or "")
    if args.vendor:
        gpus = group_by_vendor(gpus)[Vendor(args.vendor)]
    return {"gpus": [g.model_dump(mode="json") for g in gpus]}


def run_search(args: argparse.Namespace) -> dict:
    models = search_models(args.query, cache=default_cache("models", MODEL_CACHE_TTL_SECONDS))
    return {"models": [m.model_dump(mode="json") for m in models]}


def run_quants(args: argparse.Namespace) -> dict:
    return {
        "quantizations": [
            {
                "level": o.level.value,
                "label": o.label,
                "description": o.description,
                "bits_per_weight": o.bits_per_weight,
            }
            for o in QUANTIZATION_OPTIONS
        ]
    }


def _add_hardware_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--gpu", help="Accelerator name, e.g. 'RTX 4090' or 'M2 Max (64GB)'")
    parser.add_argument("--gpu-count", type=int, default=1)
    parser.add_argument("--ram", type=float, default=16, help="System RAM in GB (default: 16)")
    parser.add_argument("--vram", type=float, default=None, help="Override usable VRAM in GB")
    parser.add_argument(
        "--quant",
        choices=[q.value for q in QuantizationLevel],
        default=DEFAULT_QUANTIZATION.value,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llmfit", description="Will this LLM run on my hardware?"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not fetch the GPU catalog (Apple Silicon presets only)",
    )
    # Also accepted after the subcommand without overriding the global flag
    offline = argparse.ArgumentParser(add_help=False)
    offline.add_argument(
        "--offline",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Do not fetch the GPU catalog (Apple Silicon presets only)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", parents=[offline], help="Estimate one model on one machine")
    check.add_argument("--model", required=True, help="Seed model id or HuggingFace repo id")
    check.add_argument(
        "--context",
        type=int,
        default=4096,
        help=f"Context length in tokens (presets: {', '.join(map(str, CONTEXT_PRESETS))})",
    )
    _add_hardware_args(check)
    check.set_defaults(handler=run_check)

    compare = sub.add_parser("compare", parents=[offline], help="Quick-check every seed model")
    _add_hardware_args(compare)
    compare.set_defaults(handler=run_compare)

    gpus = sub.add_parser("gpus", parents=[offline], help="List catalog accelerators")
    gpus.add_argument("--search")
    gpus.add_argument("--vendor", choices=[v.value for v in Vendor])
    gpus.set_defaults(handler=run_gpus)

    quants = sub.add_parser("quants", help="List quantization levels")
    quants.set_defaults(handler=run_quants)

    search = sub.add_parser("search", help="Search text-generation models on the HuggingFace Hub")
    search.add_argument("--query", required=True)
    search.set_defaults(handler=run_search)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        output = args.handler(args)
    except (ModelNotFoundError, AcceleratorNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    print(json.dumps(output, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
