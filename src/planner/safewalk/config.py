"""Configuration management for the SafeWalk route planner."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


@dataclass
class RoutingConfig:
    """Routing source (OSRM) configuration."""

    base_url: str = "https://router.project-osrm.org"
    profile: str = "foot"
    timeout: float = 10.0
    alternatives: int = 3


@dataclass
class ScoringConfig:
    """Route risk scoring thresholds."""

    signal_proximity_m: float = 150.0
    corridor_proximity_m: float = 50.0  # Corridors are hand-drawn, so tighter than signals
    high_risk_threshold: float = 10.0
    unsafe_corridor_penalty: float = 20.0
    safe_corridor_bonus: float = 5.0


@dataclass
class FeedConfig:
    """Hazard report feed filtering."""

    safety_categories: tuple[str, ...] = ("safety", "transport", "flooding", "public_space")
    min_severity: int = 2
    priority_multiplier: float = 2.0


@dataclass
class PlanningConfig:
    """Planning orchestrator configuration."""

    max_workers: int | None = None


@dataclass
class Config:
    """Main configuration container."""

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    feeds: FeedConfig = field(default_factory=FeedConfig)
    planning: PlanningConfig = field(default_factory=PlanningConfig)

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Load configuration from files and environment variables."""
        # Load .env file if present
        env_file = Path(__file__).parent.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        config = cls()

        if config_dir and config_dir.exists():
            for name in ("routing.yaml", "scoring.yaml"):
                path = config_dir / name
                if path.exists():
                    config._load_yaml(path)

        config._load_from_env()

        return config

    def _load_yaml(self, path: Path) -> None:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._apply_yaml_config(data)

    def _apply_yaml_config(self, data: dict[str, Any]) -> None:
        """Apply YAML configuration data."""
        if "routing" in data:
            routing = data["routing"]
            if "base_url" in routing:
                self.routing.base_url = routing["base_url"]
            if "profile" in routing:
                self.routing.profile = routing["profile"]
            if "timeout" in routing:
                self.routing.timeout = float(routing["timeout"])
            if "alternatives" in routing:
                self.routing.alternatives = int(routing["alternatives"])

        if "scoring" in data:
            scoring = data["scoring"]
            for key in (
                "signal_proximity_m",
                "corridor_proximity_m",
                "high_risk_threshold",
                "unsafe_corridor_penalty",
                "safe_corridor_bonus",
            ):
                if key in scoring:
                    setattr(self.scoring, key, float(scoring[key]))

        if "feeds" in data:
            feeds = data["feeds"]
            if "safety_categories" in feeds:
                self.feeds.safety_categories = tuple(feeds["safety_categories"])
            if "min_severity" in feeds:
                self.feeds.min_severity = int(feeds["min_severity"])
            if "priority_multiplier" in feeds:
                self.feeds.priority_multiplier = float(feeds["priority_multiplier"])

        if "planning" in data:
            planning = data["planning"]
            if planning.get("max_workers") is not None:
                self.planning.max_workers = int(planning["max_workers"])

    def _load_from_env(self) -> None:
        """Override configuration from environment variables."""
        # Routing
        if url := os.getenv("OSRM_BASE_URL"):
            self.routing.base_url = url
        if profile := os.getenv("OSRM_PROFILE"):
            self.routing.profile = profile
        if timeout := os.getenv("OSRM_TIMEOUT"):
            self.routing.timeout = float(timeout)
        if alternatives := os.getenv("ROUTE_ALTERNATIVES"):
            self.routing.alternatives = int(alternatives)

        # Scoring
        if proximity := os.getenv("SIGNAL_PROXIMITY_M"):
            self.scoring.signal_proximity_m = float(proximity)
        if proximity := os.getenv("CORRIDOR_PROXIMITY_M"):
            self.scoring.corridor_proximity_m = float(proximity)
        if threshold := os.getenv("HIGH_RISK_THRESHOLD"):
            self.scoring.high_risk_threshold = float(threshold)
        if penalty := os.getenv("UNSAFE_CORRIDOR_PENALTY"):
            self.scoring.unsafe_corridor_penalty = float(penalty)
        if bonus := os.getenv("SAFE_CORRIDOR_BONUS"):
            self.scoring.safe_corridor_bonus = float(bonus)

        # Feeds
        if severity := os.getenv("DANGER_MIN_SEVERITY"):
            self.feeds.min_severity = int(severity)

        # Planning
        if workers := os.getenv("PLANNER_MAX_WORKERS"):
            self.planning.max_workers = int(workers)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        config_dir = Path(__file__).parent.parent / "config"
        _config = Config.load(config_dir)
    return _config


def reload_config(config_dir: Path | None = None) -> Config:
    """Reload configuration (useful for testing)."""
    global _config
    _config = Config.load(config_dir)
    return _config
