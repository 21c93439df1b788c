"""Command-line interface for decoding osu! replays and beatmaps."""

import argparse
import logging
import sys
from pathlib import Path

from osu_decode.errors import DecodeError


def cmd_replay(args: argparse.Namespace) -> int:
    from osu_decode.parsers.replay_parser import read_replay_file
    from osu_decode.schemas.enums import flag_names

    replay = read_replay_file(Path(args.path))
    mods = flag_names(replay.mods)
    print(f"Player:     {replay.player_name}")
    print(f"Mode:       {replay.mode.name}")
    print(f"Version:    {replay.game_version}")
    print(f"Map hash:   {replay.map_md5_hash}")
    print(f"Score:      {replay.total_score} (max combo {replay.max_combo}"
          f"{', perfect' if replay.perfect_combo else ''})")
    print(f"Hits:       300={replay.n_300} 100={replay.n_100} 50={replay.n_50} "
          f"geki={replay.n_geki} katu={replay.n_katu} miss={replay.n_miss}")
    print(f"Mods:       {mods}")
    print(f"Frames:     {len(replay.frames)}")
    if replay.frames:
        print(f"Duration:   {replay.absolute_times()[-1]} ms")
    return 0


def cmd_beatmap(args: argparse.Namespace) -> int:
    from osu_decode.parsers.beatmap_parser import read_beatmap_file

    beatmap = read_beatmap_file(Path(args.path))
    meta = beatmap.metadata
    kinds: dict[str, int] = {}
    for obj in beatmap.hit_objects:
        kinds[obj.kind] = kinds.get(obj.kind, 0) + 1

    print(f"{meta.artist} - {meta.title} [{meta.version}] by {meta.creator}")
    print(f"Format:        v{beatmap.format_version}")
    print(f"Mode:          {beatmap.general.mode.name}")
    diff = beatmap.difficulty
    print(f"Difficulty:    HP{diff.hp_drain_rate:g} CS{diff.circle_size:g} "
          f"OD{diff.overall_difficulty:g} AR{diff.effective_approach_rate:g}")
    print(f"Timing points: {len(beatmap.timing_points)}")
    print(f"Hit objects:   {len(beatmap.hit_objects)} "
          + " ".join(f"{k}={v}" for k, v in sorted(kinds.items())))
    print(f"Combo colours: {len(beatmap.colors.combo_colors)}")
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    from osu_decode.parsers.replay_parser import read_replay_file
    from osu_decode.pipeline.library import index_beatmaps, list_replays

    index = index_beatmaps(Path(args.maps))
    matched = 0
    for replay_path in list_replays(Path(args.replays)):
        try:
            replay = read_replay_file(replay_path)
        except DecodeError as e:
            print(f"{replay_path.name}: unreadable ({e})")
            continue
        map_path = index.get(replay.map_md5_hash)
        if map_path is None:
            print(f"{replay_path.name}: no map (MD5 hash: {replay.map_md5_hash})")
            continue
        matched += 1
        print(f"{replay_path.name}: {map_path}")
    print(f"Matched {matched} replays against {len(index)} maps")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    from osu_decode.config import LibraryConfig
    from osu_decode.pipeline.batch import run_pipeline

    config = LibraryConfig()
    if args.config:
        config = LibraryConfig.load(Path(args.config))
    if args.maps:
        config.maps_dir = Path(args.maps)
    if args.replays:
        config.replays_dir = Path(args.replays)
    if args.output:
        config.output_dir = Path(args.output)

    result = run_pipeline(config)
    print(f"Done: {result.total_sessions}/{result.total_replays} replays exported, "
          f"{result.total_frames} frames, {result.total_hit_objects} hit objects "
          f"-> {config.output_dir}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="osu-decode",
        description="Decode osu! replays (.osr) and beatmaps (.osu)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command")

    rp = sub.add_parser("replay", help="Decode a replay and print its header")
    rp.add_argument("path", help=".osr file")

    bm = sub.add_parser("beatmap", help="Parse a beatmap and print a summary")
    bm.add_argument("path", help=".osu file")

    mt = sub.add_parser("match", help="Pair replays with maps by MD5 hash")
    mt.add_argument("--maps", default="res/maps", help="Maps directory (default: res/maps)")
    mt.add_argument("--replays", default="res/replays",
                    help="Replays directory (default: res/replays)")

    ex = sub.add_parser("export", help="Decode matched sessions into Parquet")
    ex.add_argument("--config", default=None, help="Optional JSON library config")
    ex.add_argument("--maps", default=None, help="Maps directory")
    ex.add_argument("--replays", default=None, help="Replays directory")
    ex.add_argument("--output", default=None, help="Output directory")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "replay": cmd_replay,
        "beatmap": cmd_beatmap,
        "match": cmd_match,
        "export": cmd_export,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except (DecodeError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
