#!/usr/bin/env python3
"""
PowBench: Benchmarks for powsha256

Measures raw scoring throughput and checks the difficulty model
empirically: over many proofs at average A, the mean winning nonce
should sit close to A (geometric distribution, nonces start at 1).

Usage:
    powbench hashrate    [--output DIR] [--seconds S]
    powbench difficulty  [--output DIR] [--average A] [--proofs N]
    powbench parallel    [--output DIR] [--average A] [--workers W]
    powbench all         [--output DIR]
"""

from __future__ import annotations
import argparse
import json
import logging
import math
import os
import statistics
import sys
import time
from pathlib import Path
from typing import Dict, Any

# Add paths
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from powsha256 import (
    AverageAttempts,
    Prover,
    ParallelProver,
    prefix_hasher,
    score_prefixed,
    success_probability,
)


logger = logging.getLogger("powbench")

BENCH_SALT = b"powbench salt"


class PowBench:
    """Main benchmark orchestrator."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def run_hashrate(self, seconds: float = 2.0) -> Dict[str, Any]:
        """Scores per second on the calling thread."""
        print("=" * 60)
        print("Hash rate")
        print("=" * 60)

        prefix = prefix_hasher(BENCH_SALT, b"hashrate target")
        nonce = 1
        start = time.perf_counter()
        deadline = start + seconds
        while time.perf_counter() < deadline:
            for _ in range(1024):
                score_prefixed(prefix, nonce)
                nonce += 1
        elapsed = time.perf_counter() - start
        rate = (nonce - 1) / elapsed

        print(f"  {nonce - 1} scores in {elapsed:.2f} s: {rate:,.0f} scores/s")
        return {'scores': nonce - 1, 'seconds': elapsed, 'scores_per_second': rate}

    def run_difficulty(self, average: int = 256, proofs: int = 200) -> Dict[str, Any]:
        """Mean attempts per proof versus the requested average."""
        print("\n" + "=" * 60)
        print(f"Difficulty model: A = {average}, {proofs} proofs")
        print("=" * 60)

        difficulty = AverageAttempts(average)
        p = float(success_probability(difficulty.to_threshold().value))
        prover = Prover(BENCH_SALT)

        attempts = []
        start = time.perf_counter()
        for i in range(proofs):
            proof = prover.prove(f"difficulty target {i}", difficulty)
            attempts.append(proof.nonce)
        elapsed = time.perf_counter() - start

        mean = statistics.mean(attempts)
        expected = 1 / p
        # standard error of the mean of a geometric distribution
        stderr = math.sqrt((1 - p) / (p * p)) / math.sqrt(proofs)
        z = (mean - expected) / stderr if stderr else 0.0

        print(f"  expected mean attempts: {expected:.1f}")
        print(f"  observed mean attempts: {mean:.1f} (z = {z:+.2f})")
        print(f"  median: {statistics.median(attempts):.0f}, max: {max(attempts)}")
        print(f"  {elapsed / proofs * 1000:.2f} ms per proof")

        if abs(z) > 4:
            logger.warning("Observed mean is %.1f standard errors from expected", z)

        return {
            'average': average,
            'proofs': proofs,
            'expected_mean': expected,
            'observed_mean': mean,
            'z_score': z,
            'ms_per_proof': elapsed / proofs * 1000,
        }

    def run_parallel(self, average: int = 4096, workers: int = 0) -> Dict[str, Any]:
        """Wall time of sequential versus parallel proving."""
        workers = workers or os.cpu_count() or 1
        print("\n" + "=" * 60)
        print(f"Parallel search: A = {average}, {workers} workers")
        print("=" * 60)

        difficulty = AverageAttempts(average)
        results = {}
        for name, prover in (
            ('sequential', Prover(BENCH_SALT)),
            ('parallel', ParallelProver(BENCH_SALT, workers)),
        ):
            times = []
            for i in range(10):
                start = time.perf_counter()
                prover.prove(f"parallel target {i}", difficulty)
                times.append(time.perf_counter() - start)
            results[name] = statistics.median(times)
            print(f"  {name:10s}: {results[name] * 1000:8.2f} ms median")

        return {'average': average, 'workers': workers, 'median_seconds': results}

    def run_all(self) -> Dict[str, Any]:
        report = {
            'hashrate': self.run_hashrate(),
            'difficulty': self.run_difficulty(),
            'parallel': self.run_parallel(),
        }
        self.save(report, 'all')
        return report

    def save(self, report: Dict[str, Any], name: str) -> Path:
        path = self.output_dir / f'{name}.json'
        with open(path, 'w') as f:
            json.dump(report, f, indent=2)
        print(f"\nReport written to {path}")
        return path


def main():
    parser = argparse.ArgumentParser(description="powsha256 benchmarks")
    parser.add_argument('command', choices=['hashrate', 'difficulty', 'parallel', 'all'])
    parser.add_argument('--output', default='bench_results', help="Report directory")
    parser.add_argument('--seconds', type=float, default=2.0)
    parser.add_argument('--average', type=int, default=None)
    parser.add_argument('--proofs', type=int, default=200)
    parser.add_argument('--workers', type=int, default=0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    bench = PowBench(args.output)

    if args.command == 'hashrate':
        bench.save(bench.run_hashrate(args.seconds), 'hashrate')
    elif args.command == 'difficulty':
        bench.save(bench.run_difficulty(args.average or 256, args.proofs), 'difficulty')
    elif args.command == 'parallel':
        bench.save(bench.run_parallel(args.average or 4096, args.workers), 'parallel')
    else:
        bench.run_all()


if __name__ == '__main__':
    main()
