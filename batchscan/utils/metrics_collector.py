#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Copyright 2026 Vaquar Khan

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.

================================================================================
Metrics Collector
================================================================================
Purpose: Snapshot process resource usage around scan cycles
"""

import os
import time
from dataclasses import dataclass, asdict
from typing import Dict, List

import psutil


@dataclass
class SystemMetrics:
    """Process resource metrics"""
    timestamp: float
    cpu_percent: float
    memory_mb: float
    memory_percent: float

    def to_dict(self):
        return asdict(self)


class MetricsCollector:
    """Collects process metrics, one snapshot per call"""

    def __init__(self):
        self.process = psutil.Process(os.getpid())
        self.system_metrics: List[SystemMetrics] = []
        # First cpu_percent() call only primes the counter
        self.process.cpu_percent()

    def collect_system_metrics(self) -> SystemMetrics:
        """Collect current process metrics"""
        memory_info = self.process.memory_info()

        metrics = SystemMetrics(
            timestamp=time.time(),
            cpu_percent=self.process.cpu_percent(),
            memory_mb=memory_info.rss / 1024 / 1024,
            memory_percent=self.process.memory_percent()
        )

        self.system_metrics.append(metrics)
        return metrics

    def get_summary(self) -> Dict:
        """Get summary of collected metrics"""
        if not self.system_metrics:
            return {}

        return {
            'samples': len(self.system_metrics),
            'avg_cpu_percent': sum(m.cpu_percent for m in self.system_metrics) / len(self.system_metrics),
            'avg_memory_mb': sum(m.memory_mb for m in self.system_metrics) / len(self.system_metrics),
            'max_memory_mb': max(m.memory_mb for m in self.system_metrics)
        }

    def reset(self):
        """Reset collected metrics"""
        self.system_metrics = []
