import subprocess, sys
from pathlib import Path

def test_bench_micro_runs_quickly(tmp_path):
    out = tmp_path / "bench"
    out.mkdir(parents=True, exist_ok=True)
    root = Path(__file__).resolve().parents[2]
    subprocess.check_call(
        [sys.executable, str(root / "scripts/bench_micro.py"), "--seeds", "123", "--batch", "4", "--repeats", "1", "--out", str(out)]
    )
    md = (out / "bench_micro.md").read_text(encoding="utf-8")
    assert "| TINY |" in md and "| SMALL |" in md and "| DEEP |" in md
