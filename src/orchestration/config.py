"""
Pipeline Configuration

Everything the orchestrator needs is passed in through PipelineConfig; the
orchestrator itself never reads the environment. from_env() exists for the
entry point only.
"""

from typing import Optional

from pydantic import BaseModel, Field

from src.coreutils.env import env_get, env_get_int
from src.load.local_storage import DEFAULT_OUTPUT_PATH


class PipelineConfig(BaseModel):
    """Batching, retry and throttle settings for one run"""

    batch_size: int = Field(75, gt=0, description="Universe ids per request")
    request_timeout: float = Field(
        20.0, gt=0, description="Per-attempt HTTP timeout in seconds"
    )
    max_attempts: int = Field(4, ge=1, description="Attempts per request, first included")
    throttle_delay: float = Field(
        0.5, ge=0, description="Pause between batches in seconds"
    )
    backoff_base_ms: float = Field(250, gt=0, description="Backoff ceiling of attempt 1")
    backoff_cap_ms: float = Field(4000, gt=0, description="Maximum backoff ceiling")
    relay_url: Optional[str] = Field(
        None, description="Relay prefix; the target URL is appended percent-encoded"
    )
    output_path: str = Field(DEFAULT_OUTPUT_PATH, description="Snapshot artifact path")

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """
        Build a config from ROBLOX_RELAY_URL, GAMES_OUTPUT_PATH and GAMES_BATCH_SIZE

        Explicit overrides (e.g. from CLI flags) win over the environment;
        overrides set to None are ignored.
        """
        values = {
            "relay_url": env_get("ROBLOX_RELAY_URL") or None,
            "output_path": env_get("GAMES_OUTPUT_PATH"),
            "batch_size": env_get_int("GAMES_BATCH_SIZE"),
        }
        values.update(overrides)
        return cls(**{k: v for k, v in values.items() if v is not None})
