"""Process individual replay files into sessions."""

import logging
from pathlib import Path

from osu_decode.config import DecodeConfig
from osu_decode.errors import DecodeError
from osu_decode.pipeline.library import Session, load_session

logger = logging.getLogger(__name__)


def process_replay(
    replay_path: Path, index: dict[str, Path], config: DecodeConfig | None = None,
) -> Session | None:
    """Load one replay and its map, returning None (logged) on failure."""
    try:
        return load_session(replay_path, index, config)
    except LookupError as e:
        logger.warning("%s: %s", Path(replay_path).name, e)
        return None
    except (DecodeError, OSError):
        logger.exception("Failed to process %s", replay_path)
        return None
