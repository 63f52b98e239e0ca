"""Pipeline assembly: presets, dataset lookup, training and run artifacts."""

from __future__ import annotations

import json
import logging
import os
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.network import Network
from ..core.types import NetworkConfig, RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import TrainConfig, Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-basic": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [3], "learning_rate": 2.0, "init_scale": 1.0},
        "train": {
            "epochs": 2000,
            "batch_size": 4,
            "seed": 7,
            "eval_every": 50,
            "run_dir": "runs/xor-basic",
            "enable_plots": False,
        },
    },
    "logic-gates": {
        "sweep": {"datasets": ["and", "or", "xor"], "seeds": [0, 1]},
        "data": {"name": "and", "options": {}},
        "model": {"hidden": [2], "learning_rate": 1.5, "init_scale": 1.0},
        "train": {
            "epochs": 500,
            "batch_size": 2,
            "eval_every": 25,
            "run_dir": "runs/logic-gates",
            "enable_plots": False,
        },
    },
    "sine-small": {
        "data": {"name": "sine", "options": {"freq": 1.0, "n_points": 24, "seed": 0}},
        "model": {"hidden": [6], "learning_rate": 1.0, "init_scale": 0.5},
        "train": {
            "epochs": 300,
            "batch_size": 8,
            "seed": 3,
            "shuffle": True,
            "eval_every": 10,
            "run_dir": "runs/sine-small",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load preset files in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in (_FILE_PRESETS_CACHE or {}).items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_train = dict(config.get("train", {}))  # type: ignore[arg-type]
    run_root = Path(base_train.get("run_dir", _default_run_root() / "sweep"))
    datasets = list(sweep_cfg.get("datasets", [config["data"]["name"]]))  # type: ignore[index]
    rates = list(sweep_cfg.get("learning_rates", [config["model"].get("learning_rate", 1.0)]))  # type: ignore[union-attr]
    seeds = list(sweep_cfg.get("seeds", [base_train.get("seed", 0)]))
    results: List[RunResult] = []
    for dataset in datasets:
        for rate in rates:
            for seed in seeds:
                cfg = deepcopy(dict(config))
                cfg.pop("sweep", None)
                cfg["data"] = {**cfg.get("data", {}), "name": dataset}
                if dataset != config["data"]["name"]:  # type: ignore[index]
                    cfg["data"]["options"] = {}
                cfg["model"] = {**cfg.get("model", {}), "learning_rate": rate}
                cfg["train"] = {
                    **base_train,
                    "seed": seed,
                    "run_dir": str(run_root / f"{dataset}_lr{rate}_s{seed}"),
                }
                results.append(_train_single(cfg))
    return results


def _train_single(config: Mapping[str, object]) -> RunResult:
    for section in ("data", "model", "train"):
        if section not in config:
            raise KeyError(f"Pipeline config is missing the `{section}` section")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(data_cfg["name"], **data_cfg.get("options", {}))
    shape = _build_shape(model_cfg, dataset.n_inputs, dataset.n_outputs)
    net_config = NetworkConfig(shape=tuple(shape), learning_rate=float(model_cfg.get("learning_rate", 1.0)))
    train_config = TrainConfig.from_mapping(train_cfg)

    network = Network.with_config(net_config)
    init_scale = float(model_cfg.get("init_scale", 0.5))
    if init_scale > 0.0:
        network.randomize(seed=train_config.seed, scale=init_scale)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    _log_startup_summary(dataset.name, network, train_config)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=train_config.seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(network, callbacks=[jsonl, csv_sink, plots])
    history = trainer.run(dataset.batch, train_config)
    plots.close()

    resolved = _safe_config(config, shape)
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        dataset_provenance=dataset.provenance,
        network={
            **net_config.to_dict(),
            "parameters": network.parameter_count(),
            "init_scale": init_scale,
        },
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 10)))

    last_epoch, last_metrics = history[-1]
    outputs = tuple(tuple(network.evaluate(example.inputs)) for example in dataset.batch)
    return RunResult(
        epochs=last_epoch,
        final_cost=float(last_metrics["cost"]),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        outputs=outputs,
    )


def _default_run_root() -> Path:
    return Path(os.environ.get("NUDGENET_RUN_ROOT", "runs"))


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(train_cfg["run_dir"])  # type: ignore[arg-type]
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return _default_run_root() / timestamp / dataset


def _build_shape(model_cfg: Mapping[str, object], n_inputs: int, n_outputs: int) -> List[int]:
    if "shape" in model_cfg:
        shape = [int(n) for n in model_cfg["shape"]]  # type: ignore[union-attr]
        if shape and shape[0] != n_inputs:
            raise ValueError(f"Configured input width {shape[0]} but dataset has {n_inputs} inputs")
        if shape and shape[-1] != n_outputs:
            raise ValueError(f"Configured output width {shape[-1]} but dataset has {n_outputs} outputs")
        return shape
    hidden = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
    return [n_inputs, *hidden, n_outputs]


def _safe_config(config: Mapping[str, object], shape: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["shape"] = list(shape)
    return copied


def _log_startup_summary(dataset_name: str, network: Network, train_config: TrainConfig) -> None:
    logger.info("=== NudgeNet run ===")
    logger.info("Dataset       : %s", dataset_name)
    logger.info("Shape         : %s", list(network.shape))
    logger.info("Learning rate : %s", network.learning_rate)
    logger.info("Parameters    : %d", network.parameter_count())
    logger.info("Epochs        : %d (batch size %d)", train_config.epochs, train_config.batch_size)


__all__ = ["run_pipeline", "load_preset", "presets"]
