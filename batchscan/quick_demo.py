# Copyright 2024 Vaquar Khan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Quick Demo - Writes a small table and runs the cold/hot verifier against it
"""

import logging
import tempfile
from pathlib import Path

from batchscan.random_batch_scanner import RandomBatchScannerBenchmark, ScanConfig
from batchscan.random_batch_writer import write_table
from batchscan.utils.kv_simulator import Instance, KVLatencyProfile

DEMO_TABLE = "demo"
DEMO_ROWS = 10_000
DEMO_VALUE_SIZE = 50
DEMO_QUERIES = 1000


def main(profile: KVLatencyProfile = None):
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("\n" + "="*70)
    print("RANDOM BATCH SCAN VERIFIER - QUICK DEMO")
    print("="*70)

    with tempfile.TemporaryDirectory(prefix="batchscan_") as tmpdir:
        tables_dir = Path(tmpdir) / "tables"
        write_table(tables_dir, DEMO_TABLE, 0, DEMO_ROWS, DEMO_VALUE_SIZE)

        config = ScanConfig(
            instance="demo",
            zookeepers="localhost:2181",
            username="root",
            password="secret",
            table=DEMO_TABLE,
            num=DEMO_QUERIES,
            min_row=0,
            max_row=DEMO_ROWS,
            expected_value_size=DEMO_VALUE_SIZE,
            num_threads=16,
            seed=42,
            tables_dir=tables_dir,
            output_dir=Path(tmpdir) / "results",
            profile=profile or KVLatencyProfile(rows_per_tablet=1000)
        )

        connector = Instance(config.instance, config.zookeepers, tables_dir).get_connector(
            config.username, config.password
        )
        with connector.create_batch_scanner(
            config.table, config.authorizations, config.num_threads, profile=config.profile
        ) as scanner:
            cold, hot = RandomBatchScannerBenchmark(scanner, config).run_benchmark()

    print("\n" + "="*70)
    print(f"KEY FINDING: hot run is {cold.elapsed_secs / hot.elapsed_secs:.1f}x faster than cold")
    print(f"  - Cold: {cold.lookups_per_sec:.0f} lookups/sec")
    print(f"  - Hot:  {hot.lookups_per_sec:.0f} lookups/sec")
    print(f"  - Verification errors: {cold.verification_errors + hot.verification_errors}")
    print("="*70)


if __name__ == "__main__":
    main()
