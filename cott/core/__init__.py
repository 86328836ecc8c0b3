"""Benchmark core: data generation, step timing, table sweep and orchestration."""
