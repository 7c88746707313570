from dataclasses import dataclass
from datetime import datetime


@dataclass
class TransferResult:
    remote_path: str
    bytes_transferred: int
    elapsed_seconds: float
    start_time: datetime
    end_time: datetime

    @property
    def transfer_rate_bytes_per_sec(self) -> float:
        """Calculate transfer rate in bytes per second."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.bytes_transferred / self.elapsed_seconds

    @property
    def transfer_rate_mb_per_sec(self) -> float:
        return self.transfer_rate_bytes_per_sec / (1024 * 1024)

    @property
    def size_mb(self) -> float:
        return self.bytes_transferred / (1024 * 1024)

    def get_summary(self) -> str:
        return (
            f"{self.remote_path} ({self.size_mb:.2f} MB in "
            f"{self.elapsed_seconds * 1000:.0f} ms, {self.transfer_rate_mb_per_sec:.2f} MB/s)"
        )
