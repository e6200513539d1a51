from .benchmark_service import BenchmarkOutput, BenchmarkService

__all__ = ["BenchmarkOutput", "BenchmarkService"]
