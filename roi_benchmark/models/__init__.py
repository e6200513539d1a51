from .benchmark_pack import BenchmarkPack
from .campaign import CampaignRecord

__all__ = ["BenchmarkPack", "CampaignRecord"]
