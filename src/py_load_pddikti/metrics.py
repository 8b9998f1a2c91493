# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
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
"""Process-wide request counters for the diagnostics endpoint."""

import asyncio
import os
import threading
import time

import psutil
from pydantic import BaseModel


class StatsSnapshot(BaseModel):
    """Point-in-time view of the server counters and process resources."""

    uptime_seconds: float
    requests_total: int
    errors_total: int
    requests_in_flight: int
    avg_latency_ms: float
    req_per_second: float
    last_request_unix: int
    threads: int
    asyncio_tasks: int
    mem_rss_bytes: int
    mem_vms_bytes: int


class ServerMetrics:
    """Thread-safe aggregate request metrics.

    One instance is owned by the HTTP application and handed to whatever
    needs to record into it. All counters are guarded by a single lock that
    is held only for a handful of integer updates.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started = time.monotonic()
        self._requests_total = 0
        self._errors_total = 0
        self._in_flight = 0
        self._latency_ns_total = 0
        self._last_request_unix = 0

    def start_request(self) -> None:
        with self._lock:
            self._in_flight += 1

    def finish_request(self, status_code: int, duration_ns: int) -> None:
        """Record a completed request; any status of 400 or above is an error."""
        with self._lock:
            self._requests_total += 1
            self._latency_ns_total += duration_ns
            self._last_request_unix = int(time.time())
            if status_code >= 400:
                self._errors_total += 1
            self._in_flight -= 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            reqs = self._requests_total
            errs = self._errors_total
            in_flight = self._in_flight
            latency_ns = self._latency_ns_total
            last_req = self._last_request_unix

        uptime = time.monotonic() - self._started
        avg_ms = latency_ns / 1e6 / reqs if reqs else 0.0
        rps = reqs / uptime if uptime > 0 else 0.0

        try:
            task_count = len(asyncio.all_tasks())
        except RuntimeError:
            # Not called from inside an event loop.
            task_count = 0

        mem = psutil.Process(os.getpid()).memory_info()
        return StatsSnapshot(
            uptime_seconds=uptime,
            requests_total=reqs,
            errors_total=errs,
            requests_in_flight=in_flight,
            avg_latency_ms=avg_ms,
            req_per_second=rps,
            last_request_unix=last_req,
            threads=threading.active_count(),
            asyncio_tasks=task_count,
            mem_rss_bytes=mem.rss,
            mem_vms_bytes=mem.vms,
        )
