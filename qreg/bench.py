# qreg/bench.py
import argparse, csv, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .log import get_logger

logger = get_logger(__name__)

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def warmup(circ, backend):
    # one dummy run to JIT-compile & warm caches; no norm check
    _ = circ.run(backend=backend, check_norm=False)

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        logger.debug("no git commit available for bench metadata")
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "dtype": "complex128",
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
        "machine": platform.machine(),
    }

HEADER = ["qubits","depth","span","backend","threads","gates","containers","largest","wall_ms",
          "hostname","commit","dtype","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

def random_circuit(n, depth, span=2, seed=0):
    """
    Layers of single-qubit gates alternating with CNOTs inside blocks of
    `span` qubits, so the register settles into n/span containers.
    """
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                if rng.integers(0, 2) == 0:
                    c.h(k)
                else:
                    c.x(k)
        else:
            for start in range(0, n, span):
                block = list(range(start, min(start + span, n)))
                if len(block) < 2:
                    continue
                a, b = rng.choice(block, size=2, replace=False)
                c.cnot(int(a), int(b))
    return c

def time_run(circ, backend):
    t0 = time.perf_counter()
    reg = circ.run(backend=backend, check_norm=False)
    wall = (time.perf_counter() - t0) * 1e3
    sizes = [qc.get_numbits() for qc, _ in reg.containers()]
    return wall, len(sizes), max(sizes)

def numba_max_threads():
    try:
        from .apply_numba import get_threads
        return get_threads()
    except ImportError:
        return os.cpu_count() or 1

def _record(out_path, circ, depth, span, backend, threads, wall, ncont, largest):
    m = meta_row()
    write_row(out_path, {
        "qubits": circ.n, "depth": depth, "span": span, "backend": backend, "threads": threads,
        "gates": len(circ.ops), "containers": ncont, "largest": largest, "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"]
    })

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, depth, span, backend, out_path):
    print(f"[run] Qubits scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(min(ns), depth, span, seed=42), backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for n in ns:
        circ = random_circuit(n, depth, span, seed=42)
        wall, ncont, largest = time_run(circ, backend)
        _record(out_path, circ, depth, span, backend, threads, wall, ncont, largest)
        print(f"  n={n}  containers={ncont}  largest={largest}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_span(n, depth, spans, backend, out_path):
    print(f"[run] Coupling span scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(n, depth, min(spans), seed=7), backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for s in spans:
        circ = random_circuit(n, depth, s, seed=7)
        wall, ncont, largest = time_run(circ, backend)
        _record(out_path, circ, depth, s, backend, threads, wall, ncont, largest)
        print(f"  span={s}  containers={ncont}  largest={largest}  wall={wall:.2f} ms")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="mini_qreg benchmarks → data/<backend>/*.csv (auto)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--depth", type=int, default=20)
    p_qubits.add_argument("--span", type=int, default=2)
    p_qubits.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    p_span = sub.add_parser("span")
    p_span.add_argument("--n", type=int, default=12)
    p_span.add_argument("--depth", type=int, default=20)
    p_span.add_argument("--spans", type=str, default="1,2,3,4,6,12")
    p_span.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    args = p.parse_args(argv)

    base = backend_dir(args.backend)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.span, args.backend, os.path.join(base, "qubits.csv"))

    elif args.cmd == "span":
        spans = [int(x) for x in args.spans.split(",")]
        bench_span(args.n, args.depth, spans, args.backend, os.path.join(base, "span.csv"))

if __name__ == "__main__":
    main()
