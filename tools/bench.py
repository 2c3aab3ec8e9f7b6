#!/usr/bin/env python3
"""
Benchmark: measure nodes, depth and time per move on fixed positions.

Run before and after each search or evaluation change to quantify its effect.
A lower node count at the same depth indicates more effective pruning; higher
NPS indicates faster move generation or evaluation.

Usage: python3 tools/bench.py [level] [time_limit_ms]
"""
import os
import sys

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from draughts.notation import move_to_notation, position_from_fen
from draughts.search import Engine

# Fixed positions spanning opening, middlegame, tactics and endgame.
# These stay the same forever so that runs remain comparable.
POSITIONS = [
    ("Start",        "W:W31-50:B1-20"),
    ("After 32-28",  "B:W28,31,33-50:B1-20"),
    ("Centre fight", "W:W27,28,31-34,36-40,42-46,48:B5-9,11-14,16-19,22,23"),
    ("Exchange",     "W:W24,28,31-35,37-40,42-45,47-50:B1-4,6-9,11-14,16-19,21"),
    ("Multi-jump",   "W:W38:B33,22,12"),
    ("Breakthrough", "W:W16,27,32,38:B3,8,19,24"),
    ("King ending",  "W:WK46,28:BK5,19"),
    ("Man race",     "B:W11,39,44:B25,30,40"),
]


def run_position(engine: Engine, label: str, fen: str, time_limit_ms: float) -> dict:
    """Search one position on a fresh game and return metrics."""
    engine.new_game()
    position = position_from_fen(fen)
    result = engine.search(position, time_limit_ms)
    elapsed = max(1.0, result.elapsed_ms)
    return {
        "label": label,
        "move": move_to_notation(result.move) if result.move else "(none)",
        "depth": result.depth,
        "score": result.score,
        "nodes": result.nodes,
        "nps": int(result.nodes * 1000 / elapsed),
        "time_ms": int(result.elapsed_ms),
    }


def main() -> None:
    """Run all benchmark positions and print a summary table."""
    level = int(sys.argv[1]) if len(sys.argv) > 1 else 4
    time_limit_ms = float(sys.argv[2]) if len(sys.argv) > 2 else 5_000.0
    engine = Engine(level)

    print(f"Draughts engine benchmark: level {engine.settings.name}, {time_limit_ms:.0f} ms/move")
    print()
    print(
        f"{'Position':<14} {'Move':<7} {'Depth':>5} {'Score':>6} "
        f"{'Nodes':>8} {'NPS':>8} {'Time(ms)':>9}"
    )
    print("-" * 68)

    results = []
    for label, fen in POSITIONS:
        r = run_position(engine, label, fen, time_limit_ms)
        results.append(r)
        print(
            f"{r['label']:<14} {r['move']:<7} {r['depth']:>5} {r['score']:>6} "
            f"{r['nodes']:>8,} {r['nps']:>8,} {r['time_ms']:>9,}"
        )

    valid = [r for r in results if r["nodes"] > 0]
    if valid:
        avg_nodes = sum(r["nodes"] for r in valid) // len(valid)
        avg_time = sum(r["time_ms"] for r in valid) // len(valid)
        avg_nps = sum(r["nps"] for r in valid) // len(valid)
        print("-" * 68)
        print(
            f"{'AVERAGE':<14} {'':<7} {'':<5} {'':<6} "
            f"{avg_nodes:>8,} {avg_nps:>8,} {avg_time:>9,}"
        )


if __name__ == "__main__":
    main()
