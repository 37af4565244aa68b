# src/median_agg/config.py
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional
import yaml

MODES = ("scan", "moving", "partitioned", "parallel")


@dataclass
class CodecConfig:
    # Upper bound on the slot count a serialized state may request
    max_capacity: int = 1 << 28


@dataclass
class ParallelConfig:
    num_workers: Optional[int] = None
    min_chunk_size: int = 1024
    show_progress: bool = False


@dataclass
class WindowConfig:
    # None means the frame starts at the first row (running median)
    size: Optional[int] = None


@dataclass
class MedianConfig:
    name: str = "default"
    mode: str = "scan"
    value_type: str = "float8"
    input_path: Optional[Path] = None
    state_dir: Path = Path("./states")
    log_level: str = "INFO"
    codec: CodecConfig = field(default_factory=CodecConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    window: WindowConfig = field(default_factory=WindowConfig)

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}. Available: {list(MODES)}")

    @classmethod
    def from_yaml(cls, path: Path) -> "MedianConfig":
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            data = {}

        codec_data = data.get("codec", {})
        parallel_data = data.get("parallel", {})
        window_data = data.get("window", {})

        if isinstance(codec_data, dict):
            data["codec"] = CodecConfig(**codec_data)
        if isinstance(parallel_data, dict):
            data["parallel"] = ParallelConfig(**parallel_data)
        if isinstance(window_data, dict):
            data["window"] = WindowConfig(**window_data)

        config = cls(**data)
        config._normalize_paths()
        return config

    def _normalize_paths(self) -> None:
        self.state_dir = Path(self.state_dir)
        if self.input_path:
            self.input_path = Path(self.input_path)

    def save(self, path: Path) -> None:
        data = asdict(self)
        data["state_dir"] = str(self.state_dir)
        data["input_path"] = str(self.input_path) if self.input_path else None
        with open(path, "w") as f:
            yaml.safe_dump(data, f)
