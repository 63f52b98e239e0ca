"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect per-epoch cost and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "cost" not in metrics:
            return
        self._history.append((epoch, float(metrics["cost"])))

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, costs = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(epochs, costs)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Mean cost")
        ax.set_title("Training Curve")
        fig.savefig(self.run_dir / "cost.png")
        plt.close(fig)

    __call__ = on_epoch
