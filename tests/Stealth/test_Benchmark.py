from Stealth.Stealth_Benchmark import PerformanceBenchmark, quick_benchmark


def test_benchmark_operation():
    bench = PerformanceBenchmark(cpu_freq_ghz=2.0, verbose=False)
    result = bench.benchmark_operation(lambda: sum(range(100)), n_iterations=5, warmup=1)

    assert result['n_iterations'] == 5
    assert result['min_time_ms'] <= result['mean_time_ms'] <= result['max_time_ms']
    assert bench.time_to_cycles(1.0) == 2_000_000_000


def test_quick_benchmark():
    results = quick_benchmark(n_iterations=1, verbose=False)
    for name in ('keygen', 'ecdh', 'generate', 'scan', 'spending_key'):
        assert results[name]['mean_time_ms'] > 0
    assert results['memory']['rss_bytes'] > 0
