"""Benchmark registry loading: column mapping and ranking policy."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .analytics.insights import InsightThresholds
from .analytics.models import TieBreak, TimeBasis
from .exceptions import RegistryLoadError

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "config" / "benchmark_registry.yaml"


@dataclass
class BenchmarkPolicy:
    """Ranking and recommendation settings.

    Attributes:
        default_time_basis: Cadence used when the caller does not pick one
        normalize: Whether to time-normalize by default
        min_duration_days: Minimum days credited to a single campaign
        tie_break: Ordering among equal normalized ROI
        default_radius_miles: Radius for the geographic comparison set
        thresholds: Recommendation threshold tables per metric
    """

    default_time_basis: TimeBasis = TimeBasis.MONTHLY
    normalize: bool = True
    min_duration_days: int = 1
    tie_break: TieBreak = TieBreak.INPUT_ORDER
    default_radius_miles: float = 3.0
    thresholds: InsightThresholds = field(default_factory=InsightThresholds)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BenchmarkPolicy":
        """Build a policy from the registry's `policy` section."""
        return cls(
            default_time_basis=TimeBasis(data.get("default_time_basis", "monthly")),
            normalize=bool(data.get("normalize", True)),
            min_duration_days=int(data.get("min_duration_days", 1)),
            tie_break=TieBreak(data.get("tie_break", "input_order")),
            default_radius_miles=float(data.get("default_radius_miles", 3.0)),
            thresholds=InsightThresholds.from_dict(data.get("recommendations") or {}),
        )


def load_registry(path: Path | None = None) -> dict[str, Any]:
    """Load the registry YAML (campaign schema + policy)."""
    path = path or DEFAULT_REGISTRY_PATH
    try:
        with open(path) as f:
            registry = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RegistryLoadError(f"Failed to load registry from {path}: {e}") from e

    if not isinstance(registry, dict) or "campaigns" not in registry:
        raise RegistryLoadError(f"Registry {path} has no 'campaigns' section")
    return registry


def load_policy(path: Path | None = None) -> BenchmarkPolicy:
    """Load only the ranking policy from the registry."""
    registry = load_registry(path)
    return BenchmarkPolicy.from_dict(registry.get("policy") or {})
