"""
Sixdegrees Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Search Configuration
    DEFAULT_SOURCE: str = os.getenv("SIXDEGREES_DEFAULT_SOURCE", "Kevin Bacon")
    # Six degrees is the folklore bound; raise it for sparse corners of the graph
    MAX_GENERATIONS: int = int(os.getenv("SIXDEGREES_MAX_GENERATIONS", "6"))

    # Politeness delays between resolver calls
    NODE_DELAY_SECONDS: float = float(os.getenv("SIXDEGREES_NODE_DELAY_SECONDS", "0.02"))
    GENERATION_DELAY_SECONDS: float = float(
        os.getenv("SIXDEGREES_GENERATION_DELAY_SECONDS", "1.0")
    )

    # Snapshot written after every fold
    SNAPSHOT_PATH: Path = Path(os.getenv("SIXDEGREES_SNAPSHOT_PATH", "data/graph.json"))

    # Wikipedia resolver
    WIKIPEDIA_API_URL: str = os.getenv(
        "WIKIPEDIA_API_URL", "https://en.wikipedia.org/w/api.php"
    )
    WIKIPEDIA_USER_AGENT: str = os.getenv(
        "WIKIPEDIA_USER_AGENT", "sixdegrees/0.1 (degrees-of-separation explorer)"
    )
    RESOLVER_TIMEOUT_SECONDS: float = float(os.getenv("RESOLVER_TIMEOUT_SECONDS", "10"))
    RESOLVER_MAX_ATTEMPTS: int = int(os.getenv("RESOLVER_MAX_ATTEMPTS", "3"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        if cls.MAX_GENERATIONS < 1:
            raise ValueError(
                "SIXDEGREES_MAX_GENERATIONS must be at least 1 so the search can expand"
            )

        if cls.RESOLVER_MAX_ATTEMPTS < 1:
            raise ValueError("RESOLVER_MAX_ATTEMPTS must be at least 1")

        if cls.RESOLVER_TIMEOUT_SECONDS <= 0:
            raise ValueError("RESOLVER_TIMEOUT_SECONDS must be positive")

        if cls.NODE_DELAY_SECONDS < 0 or cls.GENERATION_DELAY_SECONDS < 0:
            raise ValueError(
                "SIXDEGREES_NODE_DELAY_SECONDS and SIXDEGREES_GENERATION_DELAY_SECONDS "
                "cannot be negative"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Sixdegrees Configuration:",
            f"  Default Source: {cls.DEFAULT_SOURCE}",
            f"  Max Generations: {cls.MAX_GENERATIONS}",
            f"  Node Delay: {cls.NODE_DELAY_SECONDS}s",
            f"  Generation Delay: {cls.GENERATION_DELAY_SECONDS}s",
            f"  Snapshot: {cls.SNAPSHOT_PATH}",
            f"  Wikipedia API: {cls.WIKIPEDIA_API_URL}",
        ]
        return "\n".join(lines)
