# main.py
"""Command line entry point for the median aggregate."""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from median_agg.aggregators import get_aggregator
from median_agg.codec import encode
from median_agg.config import MODES, MedianConfig
from median_agg.core import add, finalize
from median_agg.parallel import combine_states
from median_agg.types import DEFAULT_REGISTRY, ValueType

logger = logging.getLogger("median_agg.main")

NULL_LITERALS = {"", "NULL", "null", "\\N"}


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Median of a stream of values"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=list(MODES),
        help="Override aggregation mode"
    )
    parser.add_argument(
        "--type",
        dest="value_type",
        type=str,
        help="Value type name (int4, float8, numeric, text, ...)"
    )
    parser.add_argument(
        "--input",
        type=str,
        help="File with one value per line (stdin if omitted)"
    )
    parser.add_argument(
        "--window",
        type=int,
        help="Frame size in rows for moving mode"
    )
    parser.add_argument(
        "--num-workers",
        type=int,
        help="Worker processes for parallel mode"
    )
    parser.add_argument(
        "--save-state",
        type=str,
        help="Write the serialized aggregate state to this path"
    )
    parser.add_argument(
        "--merge-states",
        type=str,
        nargs="+",
        help="Combine previously saved states instead of reading values"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ...)"
    )
    return parser.parse_args(argv)


def load_config_from_args(args: argparse.Namespace) -> MedianConfig:
    """Load configuration and apply CLI overrides."""
    if args.config:
        config = MedianConfig.from_yaml(Path(args.config))
    else:
        config = MedianConfig()

    if args.mode:
        config.mode = args.mode
    if args.value_type:
        config.value_type = args.value_type
    if args.input:
        config.input_path = Path(args.input)
    if args.window is not None:
        config.window.size = args.window
    if args.num_workers is not None:
        config.parallel.num_workers = args.num_workers
    if args.log_level:
        config.log_level = args.log_level

    config._normalize_paths()
    return config


def parse_value(value_type: ValueType, text: str) -> Any:
    """Parse one literal; NULL markers and blank lines become None."""
    text = text.rstrip("\r\n")
    if text.strip() in NULL_LITERALS:
        return None
    return value_type.parse(text)


def read_lines(path: Optional[Path]) -> List[str]:
    if path is None:
        return sys.stdin.readlines()
    with open(path) as f:
        return f.readlines()


def read_values(value_type: ValueType, lines: Iterable[str]) -> List[Any]:
    return [parse_value(value_type, line) for line in lines]


def read_rows(value_type: ValueType, lines: Iterable[str]) -> List[Tuple[str, Any]]:
    """Parse ``key<TAB>value`` rows for partitioned mode."""
    rows = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        key, sep, text = line.rstrip("\r\n").partition("\t")
        if not sep:
            raise ValueError(f"Line {number}: expected 'key<TAB>value', got {line!r}")
        rows.append((key, parse_value(value_type, text)))
    return rows


def save_state(values: List[Any], value_type: ValueType, path: Path) -> None:
    # An empty input still produces a (zero-count) state file
    state = add(None, None, value_type.type_id)
    for value in values:
        state = add(state, value, value_type.type_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode(state))
    print(f"Saved state with {state.count} values to {path}")


def merge_saved_states(paths: List[str], config: MedianConfig) -> Any:
    blobs = [Path(p).read_bytes() for p in paths]
    state = combine_states(
        blobs,
        config=config.codec,
        show_progress=config.parallel.show_progress,
    )
    print(f"Merged {len(blobs)} states: {state.count if state else 0} values")
    return finalize(state)


def build_aggregator(config: MedianConfig):
    """Instantiate the aggregator for ``config.mode``."""
    kwargs = {"value_type": config.value_type}
    if config.mode == "moving":
        kwargs["window"] = config.window.size
    elif config.mode == "parallel":
        kwargs.update(
            num_workers=config.parallel.num_workers,
            min_chunk_size=config.parallel.min_chunk_size,
            codec=config.codec,
            show_progress=config.parallel.show_progress,
        )
    return get_aggregator(config.mode, **kwargs)


def format_value(value: Any) -> str:
    return "NULL" if value is None else str(value)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = load_config_from_args(args)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    value_type = DEFAULT_REGISTRY.lookup(config.value_type)

    if args.merge_states:
        print(format_value(merge_saved_states(args.merge_states, config)))
        return 0

    lines = read_lines(config.input_path)
    logger.info(f"Read {len(lines)} lines as {value_type.name} ({config.mode} mode)")

    if args.save_state:
        save_state(read_values(value_type, lines), value_type, Path(args.save_state))
        return 0

    aggregator = build_aggregator(config)
    if config.mode == "partitioned":
        result = aggregator(read_rows(value_type, lines))
        for key, median in result.value.items():
            print(f"{key}\t{format_value(median)}")
    elif config.mode == "moving":
        result = aggregator(read_values(value_type, lines))
        for median in result.value:
            print(format_value(median))
    else:
        result = aggregator(read_values(value_type, lines))
        print(format_value(result.value))

    logger.info(f"Aggregated {result.count} non-null values")
    return 0


if __name__ == "__main__":
    sys.exit(main())
