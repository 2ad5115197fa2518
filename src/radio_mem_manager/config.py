"""Runtime configuration. Every value can be overridden via environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Default data file for auto-save/load
DEFAULT_DATA_FILE = Path.home() / ".radio_mem_manager.json"


@dataclass
class AppConfig:
    """Storage location, web server address and logging level"""

    data_file: Path = DEFAULT_DATA_FILE
    host: str = "127.0.0.1"
    port: int = 5000
    storage_quota_bytes: Optional[int] = 5_000_000
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "AppConfig":
        quota = os.getenv("RADIO_MEM_QUOTA", "5000000").strip()
        return cls(
            data_file=Path(os.getenv("RADIO_MEM_DATA_FILE", str(DEFAULT_DATA_FILE))).expanduser(),
            host=os.getenv("RADIO_MEM_HOST", "127.0.0.1").strip() or "127.0.0.1",
            port=int(os.getenv("RADIO_MEM_PORT", "5000")),
            storage_quota_bytes=int(quota) if quota and quota != "0" else None,
            log_level=os.getenv("RADIO_MEM_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
        )
