"""Decoder and library configuration: dataclasses with JSON persistence."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path


@dataclass
class DecodeConfig:
    """Limits and tunables for the decoders and path sampler."""

    # Upper bound on the decompressed replay frame stream. A crafted header
    # cannot make the decoder allocate more than this.
    max_frame_stream_bytes: int = 64 * 1024 * 1024

    # Points sampled per Bézier/Catmull-Rom/arc segment when building a slider path
    path_samples_per_segment: int = 50

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> DecodeConfig:
        """Load config from JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        # Only pass known fields to handle forward/backward compat
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class LibraryConfig:
    """Where replays and maps live, and where exports go."""

    maps_dir: Path = Path("res/maps")
    replays_dir: Path = Path("res/replays")
    output_dir: Path = Path("data/processed")
    decode: DecodeConfig | None = None

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "maps_dir": str(self.maps_dir),
            "replays_dir": str(self.replays_dir),
            "output_dir": str(self.output_dir),
            "decode": asdict(self.decode) if self.decode else None,
        }
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> LibraryConfig:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        decode = None
        if data.get("decode"):
            known = {f.name for f in fields(DecodeConfig)}
            decode = DecodeConfig(**{k: v for k, v in data["decode"].items() if k in known})
        return cls(
            maps_dir=Path(data.get("maps_dir", "res/maps")),
            replays_dir=Path(data.get("replays_dir", "res/replays")),
            output_dir=Path(data.get("output_dir", "data/processed")),
            decode=decode,
        )
