"""
Stealth Performance Benchmark Module
Đo performance các thao tác của stealth core

Metrics:
- Cycle counts (ước lượng từ time)
- Throughput (operations/second)
- Latency (ms per operation)
- Memory usage của process
"""

import statistics
import time

import psutil

from .Stealth_Address import (
    generate_stealth_address, is_stealth_address_for_us, derive_stealth_spending_key, get_meta_address,
)
from .Stealth_CurveArithmetic import BASE_POINT, get_base_point_table
from .Stealth_ECDH import compute_shared_secret
from .Stealth_FieldArithmetic import FieldElement
from .Stealth_KeyGen import generate_stealth_keys, derive_stealth_keys_from_seed, KeyPair

DEFAULT_CPU_FREQ_GHZ = 2.4


class PerformanceBenchmark:
    """
    Benchmark suite cho stealth core
    """

    def __init__(self, cpu_freq_ghz=None, verbose=True):
        """
        Args:
            cpu_freq_ghz: CPU frequency in GHz (nếu None, auto-detect qua psutil)
            verbose: in kết quả ra stdout
        """
        if cpu_freq_ghz is None:
            try:
                cpu_freq = psutil.cpu_freq()
            except (AttributeError, NotImplementedError, OSError):
                cpu_freq = None
            if cpu_freq is not None and cpu_freq.current:
                self.cpu_freq_ghz = cpu_freq.current / 1000.0
            else:
                self.cpu_freq_ghz = DEFAULT_CPU_FREQ_GHZ
        else:
            self.cpu_freq_ghz = cpu_freq_ghz

        self.verbose = verbose
        self.results = {}

    def time_to_cycles(self, seconds):
        """Convert time (seconds) → estimated CPU cycles"""
        return int(seconds * self.cpu_freq_ghz * 1e9)

    def benchmark_operation(self, operation, n_iterations=100, warmup=10):
        """
        Benchmark một operation

        Args:
            operation: callable không tham số
            n_iterations: số lần đo
            warmup: số lần chạy trước khi đo

        Returns:
            dict: thống kê thời gian
        """
        for _ in range(warmup):
            operation()

        times = []
        for _ in range(n_iterations):
            start = time.perf_counter()
            operation()
            times.append(time.perf_counter() - start)

        mean_time = statistics.mean(times)
        stdev_time = statistics.stdev(times) if len(times) > 1 else 0

        return {
            "mean_time_ms": mean_time * 1000,
            "median_time_ms": statistics.median(times) * 1000,
            "stdev_time_ms": stdev_time * 1000,
            "min_time_ms": min(times) * 1000,
            "max_time_ms": max(times) * 1000,
            "mean_cycles": self.time_to_cycles(mean_time),
            "throughput": 1.0 / mean_time if mean_time > 0 else 0,
            "n_iterations": n_iterations,
        }

    def _record(self, name, label, result):
        self.results[name] = result
        if self.verbose:
            print(f"\n{label}:")
            print(f"  Mean time: {result['mean_time_ms']:.4f} ms")
            print(f"  Est. cycles: {result['mean_cycles']:,}")
            print(f"  Throughput: {result['throughput']:,.1f} ops/sec")

    def _header(self, title):
        if self.verbose:
            print("\n" + "=" * 70)
            print(title)
            print("=" * 70)

    def benchmark_field_operations(self, n_iterations=10000):
        self._header("FIELD ARITHMETIC BENCHMARK")

        a = FieldElement(12345)
        b = FieldElement(67890)

        self._record('field_mul', "Field Multiplication",
                     self.benchmark_operation(lambda: a.mul(b), n_iterations=n_iterations))
        self._record('field_invert', "Field Inversion",
                     self.benchmark_operation(lambda: a.invert(), n_iterations=max(1, n_iterations // 10)))

    def benchmark_curve_operations(self, n_iterations=100):
        self._header("CURVE OPERATIONS BENCHMARK")

        table = get_base_point_table()
        scalar = 2 ** 254 + 12345

        self._record('scalar_mul', "Scalar Multiplication (double-and-add)",
                     self.benchmark_operation(lambda: BASE_POINT.scalar_mul(scalar),
                                              n_iterations=n_iterations, warmup=1))
        self._record('scalar_mul_table', "Scalar Multiplication (precomputed table)",
                     self.benchmark_operation(lambda: table.scalar_mul(scalar),
                                              n_iterations=n_iterations, warmup=1))

    def benchmark_stealth_operations(self, n_iterations=20):
        self._header("STEALTH OPERATIONS BENCHMARK")

        keys = derive_stealth_keys_from_seed(bytes(32))
        meta = get_meta_address(keys)
        peer = KeyPair.generate()
        result = generate_stealth_address(meta)

        view_priv = bytes(keys.view_key.private_key)
        spend_pub = keys.spend_key.public_key

        self._record('keygen', "Stealth Key Generation",
                     self.benchmark_operation(generate_stealth_keys, n_iterations=n_iterations, warmup=1))
        self._record('ecdh', "Shared Secret (X25519)",
                     self.benchmark_operation(lambda: compute_shared_secret(view_priv, peer.public_key),
                                              n_iterations=n_iterations, warmup=1))
        self._record('generate', "Stealth Address Generation",
                     self.benchmark_operation(lambda: generate_stealth_address(meta),
                                              n_iterations=n_iterations, warmup=1))
        self._record('scan', "Ownership Scan",
                     self.benchmark_operation(
                         lambda: is_stealth_address_for_us(result.stealth_address, result.ephemeral_pub_key,
                                                           view_priv, spend_pub),
                         n_iterations=n_iterations, warmup=1))
        self._record('spending_key', "Spending Key Derivation",
                     self.benchmark_operation(
                         lambda: derive_stealth_spending_key(result.stealth_address, result.ephemeral_pub_key,
                                                             view_priv, spend_pub),
                         n_iterations=n_iterations, warmup=1))

    def memory_analysis(self):
        """Phân tích memory usage của process"""
        self._header("MEMORY USAGE ANALYSIS")

        info = psutil.Process().memory_info()
        self.results['memory'] = {'rss_bytes': info.rss, 'vms_bytes': info.vms}

        if self.verbose:
            print(f"\nResident set size: {info.rss / (1024 * 1024):.2f} MB")
            print(f"Virtual memory size: {info.vms / (1024 * 1024):.2f} MB")

    def run_full_benchmark(self):
        """Chạy toàn bộ benchmark"""
        if self.verbose:
            print("\n" + "=" * 70)
            print("STEALTH ADDRESS PERFORMANCE BENCHMARK")
            print("=" * 70)
            print(f"CPU Frequency: {self.cpu_freq_ghz:.2f} GHz (estimated)")

        self.benchmark_field_operations()
        self.benchmark_curve_operations()
        self.benchmark_stealth_operations()
        self.memory_analysis()

        return self.results


def quick_benchmark(n_iterations=5, verbose=True):
    """Quick benchmark cho các stealth operations"""
    bench = PerformanceBenchmark(verbose=verbose)
    bench.benchmark_stealth_operations(n_iterations=n_iterations)
    bench.memory_analysis()
    return bench.results


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "quick":
        quick_benchmark()
    else:
        PerformanceBenchmark().run_full_benchmark()
