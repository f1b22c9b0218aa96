from dotenv import load_dotenv
import os

load_dotenv()  # take environment variables from .env


def env_get(key: str, default: str | None = None) -> str | None:
    """Get environment variable or return default."""
    return os.getenv(key, default)


def env_get_int(key: str, default: int | None = None) -> int | None:
    """Get an integer environment variable; empty values fall back to default."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}") from e
