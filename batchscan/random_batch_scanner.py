"""
Random Batch Scanner - Verifies Batched Point Lookups

Draws a random sample of distinct rows from [min, max), fetches them with a
single batch scan and checks every returned value against the deterministic
value generator. Two cycles are run on the same scanner:

- COLD: first cycle, tablet locations not yet cached
- HOT:  second cycle, same scanner after the cold run warmed it up

Each cycle draws its own sample. With -s both cycles use the same seed and
therefore the same sample; without it the two samples are independent.

Credentials are checked against --users-file when one is given. Without it
the simulated instance accepts any non-empty user name and ignores the
password.

Usage:
    batchscan-random-scan [-s <seed>] <instance name> <zoo keepers> <username> <password>
        <table> <num> <min> <max> <expected value size> <num threads> <auths>
"""

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, List, Optional

from batchscan.utils.kv_simulator import Instance, KVLatencyProfile
from batchscan.utils.metrics_collector import MetricsCollector
from batchscan.utils.query_sampler import (
    check_sample_bounds,
    generate_random_queries,
    make_random,
)
from batchscan.utils.verifying_receiver import CountingVerifyingReceiver

logger = logging.getLogger(__name__)

MIN_ELAPSED_SECS = 1e-9


@dataclass(frozen=True)
class CycleResult:
    """Results from one sample/scan/verify cycle"""
    phase: str
    num_queries: int
    elapsed_secs: float
    lookups_per_sec: float
    num_results: int
    rows_not_found: int
    value_mismatches: int
    unexpected_keys: int
    rss_mb: float = 0.0
    cpu_percent: float = 0.0

    @property
    def verification_errors(self) -> int:
        return self.value_mismatches + self.unexpected_keys

    def to_dict(self):
        return asdict(self)


@dataclass
class ScanConfig:
    """Parameters for a cold/hot batch scan run"""
    instance: str
    zookeepers: str
    username: str
    password: str
    table: str
    num: int
    min_row: int
    max_row: int
    expected_value_size: int
    num_threads: int
    authorizations: List[str] = field(default_factory=list)
    seed: Optional[int] = None
    tables_dir: Path = Path("tables")
    output_dir: Path = Path("results")
    profile: KVLatencyProfile = field(default_factory=KVLatencyProfile)
    users: Optional[Dict[str, str]] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ScanConfig":
        return cls(
            instance=args.instance,
            zookeepers=args.zookeepers,
            username=args.username,
            password=args.password,
            table=args.table,
            num=args.num,
            min_row=args.min,
            max_row=args.max,
            expected_value_size=args.expected_value_size,
            num_threads=args.num_threads,
            authorizations=[a for a in args.auths.split(",") if a],
            seed=args.seed,
            tables_dir=args.tables_dir,
            output_dir=args.output_dir,
            users=load_users(args.users_file) if args.users_file else None,
            profile=KVLatencyProfile(
                lookup_avg_ms=args.lookup_avg_ms,
                lookup_max_ms=max(args.lookup_avg_ms, KVLatencyProfile.lookup_max_ms),
                lookup_min_ms=min(args.lookup_avg_ms, KVLatencyProfile.lookup_min_ms),
                metadata_lookup_ms=args.metadata_lookup_ms
            )
        )

    def validate(self):
        """
        Raises:
            ValueError: If the run can never complete as configured
        """
        check_sample_bounds(self.num, self.min_row, self.max_row)

        if self.expected_value_size < 0:
            raise ValueError(f"expected value size must be non-negative, got {self.expected_value_size}")
        if self.num_threads < 1:
            raise ValueError(f"num threads must be at least 1, got {self.num_threads}")

        for knob in ("lookup_min_ms", "lookup_avg_ms", "lookup_max_ms", "metadata_lookup_ms"):
            if getattr(self.profile, knob) < 0:
                raise ValueError(f"{knob} must be non-negative, got {getattr(self.profile, knob)}")
        if self.profile.rows_per_tablet < 1:
            raise ValueError(f"rows_per_tablet must be at least 1, got {self.profile.rows_per_tablet}")


def do_random_queries(
    num: int,
    min_row: int,
    max_row: int,
    expected_value_size: int,
    rng: random.Random,
    scanner,
    phase: str = "cycle",
    metrics: MetricsCollector = None
) -> CycleResult:
    """
    Run one cycle: sample, scan, verify, report

    Args:
        num: Number of distinct rows to look up
        min_row: Lowest row id (inclusive)
        max_row: Highest row id (exclusive)
        expected_value_size: Size of the values written for every row
        rng: Random source for the sample
        scanner: Batch scanner; needs set_ranges() and iteration of (key, value)
        phase: Label for the report
        metrics: Optional collector snapshotted after the scan

    Returns:
        CycleResult for the cycle
    """
    ranges, expected_rows = generate_random_queries(num, min_row, max_row, rng)

    scanner.set_ranges(ranges)

    receiver = CountingVerifyingReceiver(expected_rows, expected_value_size)

    start = time.perf_counter()

    for key, value in scanner:
        receiver.receive(key, value)

    end = time.perf_counter()
    elapsed = max(end - start, MIN_ELAPSED_SECS)

    lookups_per_sec = num / elapsed
    print(f"{lookups_per_sec:6.2f} lookups/sec {elapsed:6.2f} secs")
    print(f"num results : {receiver.count:,}")

    rows_not_found = receiver.rows_not_found()
    if rows_not_found > 0:
        logger.warning(f"Did not find {rows_not_found} rows")

    rss_mb = cpu_percent = 0.0
    if metrics is not None:
        snapshot = metrics.collect_system_metrics()
        rss_mb = snapshot.memory_mb
        cpu_percent = snapshot.cpu_percent

    return CycleResult(
        phase=phase,
        num_queries=num,
        elapsed_secs=elapsed,
        lookups_per_sec=lookups_per_sec,
        num_results=receiver.count,
        rows_not_found=rows_not_found,
        value_mismatches=len(receiver.mismatches),
        unexpected_keys=len(receiver.unexpected_keys),
        rss_mb=rss_mb,
        cpu_percent=cpu_percent
    )


def load_users(path: Path) -> Dict[str, str]:
    """Load a {user: password} registry for the simulated instance"""
    with open(path) as f:
        users = json.load(f)

    if not isinstance(users, dict):
        raise ValueError(f"{path} must hold a JSON object of user -> password")
    return {str(user): str(password) for user, password in users.items()}


class RandomBatchScannerBenchmark:
    """Cold then hot batch scan verification on one scanner"""

    PHASES = ("cold", "hot")

    def __init__(self, scanner, config: ScanConfig, output_dir: Path = None):
        self.scanner = scanner
        self.config = config
        self.output_dir = Path(output_dir or config.output_dir)
        self.metrics = MetricsCollector()

    def run_cycle(self, phase: str) -> CycleResult:
        """Run one cycle with a freshly seeded random source"""
        print(f"\n=== {phase.upper()} run ===")

        # Same seed policy for every phase: explicit seed or a fresh OS seed
        rng = make_random(self.config.seed)

        return do_random_queries(
            self.config.num,
            self.config.min_row,
            self.config.max_row,
            self.config.expected_value_size,
            rng,
            self.scanner,
            phase=phase,
            metrics=self.metrics
        )

    def run_benchmark(self) -> List[CycleResult]:
        """
        Run the cold cycle followed by the hot cycle

        Returns:
            One CycleResult per phase, cold first
        """
        print(f"\n{'='*60}")
        print("RANDOM BATCH SCAN - Cold/Hot Lookup Verification")
        print(f"{'='*60}")
        print(f"Table: {self.config.table}")
        print(f"Queries: {self.config.num:,} rows from [{self.config.min_row:,}, {self.config.max_row:,})")
        print(f"Threads: {self.config.num_threads}")
        print(f"Seed: {self.config.seed if self.config.seed is not None else 'random'}")

        results = [self.run_cycle(phase) for phase in self.PHASES]

        self._print_summary(results)
        self._save_results(results)

        return results

    def _print_summary(self, results: List[CycleResult]):
        print(f"\n{'='*60}")
        print("RESULTS SUMMARY")
        print(f"{'='*60}")
        print(f"{'Phase':<8} {'Lookups/s':<12} {'Secs':<10} {'Results':<10} {'Missing':<10} {'Errors':<8}")
        print("-" * 60)
        for r in results:
            print(f"{r.phase:<8} {r.lookups_per_sec:<12.2f} {r.elapsed_secs:<10.2f} "
                  f"{r.num_results:<10,} {r.rows_not_found:<10,} {r.verification_errors:<8,}")
        print(f"{'='*60}")

        if len(results) == 2:
            speedup = results[0].elapsed_secs / results[1].elapsed_secs
            print(f"\nHot run speedup: {speedup:.1f}x")

    def _save_results(self, results: List[CycleResult]):
        """Save results to JSON file"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_file = self.output_dir / "random_batch_scanner_results.json"

        payload = {
            'table': self.config.table,
            'seed': self.config.seed,
            'cycles': [r.to_dict() for r in results],
            'scanner': self.scanner.get_stats() if hasattr(self.scanner, 'get_stats') else {},
            'system': self.metrics.get_summary()
        }

        with open(output_file, 'w') as f:
            json.dump(payload, f, indent=2)
        print(f"\nResults saved to {output_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batchscan-random-scan",
        description="Verify random batched point lookups against a populated table (cold, then hot)"
    )
    parser.add_argument("-s", "--seed", type=int, default=None,
                        help="seed for the random sample (default: random)")
    parser.add_argument("instance", help="instance name")
    parser.add_argument("zookeepers", help="comma-separated coordinator endpoints")
    parser.add_argument("username")
    parser.add_argument("password")
    parser.add_argument("table")
    parser.add_argument("num", type=int, help="number of rows to look up")
    parser.add_argument("min", type=int, help="lowest row id (inclusive)")
    parser.add_argument("max", type=int, help="highest row id (exclusive)")
    parser.add_argument("expected_value_size", type=int)
    parser.add_argument("num_threads", type=int)
    parser.add_argument("auths", help="comma-separated authorization labels")
    parser.add_argument("--tables-dir", type=Path, default=Path("tables"),
                        help="directory holding the instance's tables")
    parser.add_argument("--output-dir", type=Path, default=Path("results"))
    parser.add_argument("--users-file", type=Path, default=None,
                        help="JSON object mapping user names to passwords; without it any non-empty user is accepted")
    parser.add_argument("--lookup-avg-ms", type=float, default=KVLatencyProfile.lookup_avg_ms)
    parser.add_argument("--metadata-lookup-ms", type=float, default=KVLatencyProfile.metadata_lookup_ms)
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    config = ScanConfig.from_args(args)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    instance = Instance(config.instance, config.zookeepers, config.tables_dir, users=config.users)
    connector = instance.get_connector(config.username, config.password)
    scanner = connector.create_batch_scanner(
        config.table,
        config.authorizations,
        config.num_threads,
        profile=config.profile
    )

    try:
        RandomBatchScannerBenchmark(scanner, config).run_benchmark()
    finally:
        scanner.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
