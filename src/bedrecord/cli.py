import argparse
import logging
import os
import sys
import time

from functools import cmp_to_key
from importlib import metadata

from .bed_io import read_bed, read_records, scan_bed, write_bed
from .core.record import Record
from .core.schema import BED3, bed_schema, Schema
from .errors import BedParseError
from .memory_logger import configure_memory_logger, MemoryLogger, remove_managed_memory_handlers

title = "bedrecord: typed BED record reader/writer"


_INDENT = " " * 4


def _format_action(action, value):
    if not action.option_strings:
        return None if value is None else str(value)
    if action.nargs == 0:
        return action.option_strings[-1] if value else None
    if value is None or value == action.default:
        return None
    return f"{action.option_strings[-1]} {value}"


def _format_command(args, parser) -> str:
    """Render the parsed command one argument per line for the console masthead and log file.

    Positionals of the chosen subcommand come first, then its options that differ from their
    defaults, then the global flags that are set.
    """
    subparsers = next(a for a in parser._actions if isinstance(a, argparse._SubParsersAction))
    chosen = subparsers.choices[args.cmd]

    lines = [f"bedrecord {args.cmd}"]
    for depth, actions in ((2, chosen._actions), (1, parser._actions)):
        # positionals sort ahead of options; sorted() keeps declaration order otherwise
        for action in sorted(actions, key=lambda a: bool(a.option_strings)):
            if isinstance(action, (argparse._HelpAction, argparse._SubParsersAction)):
                continue
            text = _format_action(action, getattr(args, action.dest))
            if text is not None:
                lines.append(_INDENT * depth + text)
    return os.linesep.join(lines)


def _schema_from_args(args) -> Schema:
    if args.schema is not None:
        return Schema.from_descriptor(args.schema)
    if args.columns is None:
        return BED3
    return bed_schema(args.columns)


def _validate(args) -> int:
    logger = MemoryLogger(__name__)
    schema = _schema_from_args(args)
    logger.info(f"Validating {args.bed} against {schema.descriptor()}")

    num_records = 0
    num_errors = 0
    for result in scan_bed(args.bed, schema):
        if isinstance(result, BedParseError):
            num_errors += 1
            logger.warning(str(result))
        else:
            num_records += 1

    sys.stdout.write(f"records={num_records} errors={num_errors}" + os.linesep)
    logger.info("Done!")
    return 1 if num_errors else 0


def _normalize(args) -> int:
    logger = MemoryLogger(__name__)
    schema = _schema_from_args(args)
    t = time.time()

    logger.info(f"Reading records from {args.bed}")
    records = list(read_records(args.bed, schema, on_error=args.on_error))
    if args.sort:
        logger.info("Sorting records")
        records.sort(key=cmp_to_key(Record.compare))

    count = write_bed(args.output, records)
    logger.info(f"Normalized {count} records in {time.time() - t:.2f} seconds")
    return 0


def _convert(args) -> int:
    logger = MemoryLogger(__name__)
    schema = _schema_from_args(args)

    logger.info(f"Reading records from {args.bed}")
    df = read_bed(args.bed, schema, on_error=args.on_error)

    if str(args.output).endswith(".parquet"):
        df.write_parquet(args.output)
    else:
        df.write_csv(args.output, separator="\t")
    logger.info(f"Wrote {df.shape[0]} rows to {args.output}")
    return 0


def _create_common_parser(subp, name, help):
    common_p = subp.add_parser(name, help=help, formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    common_p.add_argument("bed", help="Path to BED file (optionally gzipped).")
    schema_group = common_p.add_mutually_exclusive_group(required=False)
    schema_group.add_argument(
        "--columns",
        type=int,
        choices=range(3, 13),
        metavar="{3..12}",
        help="Number of standard BED columns to parse. Defaults to 3.",
    )
    schema_group.add_argument(
        "--schema",
        help="Custom schema as comma-delimited name:type pairs, e.g. `chrom:text,start:int,strand:char`.",
    )
    common_p.add_argument("--out", default="bedrecord", help="Prefix for the log file.")
    return common_p


def _add_on_error(parser):
    parser.add_argument(
        "--on-error",
        choices=["raise", "skip"],
        default="raise",
        help="Abort on the first malformed line, or log and skip it.",
    )


def _main(args):
    argp = argparse.ArgumentParser(
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    argp.add_argument("-v", "--verbose", action="store_true", default=False)
    argp.add_argument("-q", "--quiet", action="store_true", default=False)
    subp = argp.add_subparsers(dest="cmd", required=True, help="Subcommands for bedrecord")

    validate_p = _create_common_parser(subp, "validate", help="Check that every line of a BED file parses.")
    validate_p.set_defaults(func=_validate)

    normalize_p = _create_common_parser(subp, "normalize", help="Rewrite a BED file in canonical form.")
    normalize_p.add_argument("output", help="Path to output BED file (.gz to compress).")
    normalize_p.add_argument("--sort", action="store_true", help="Sort records column by column.")
    _add_on_error(normalize_p)
    normalize_p.set_defaults(func=_normalize)

    convert_p = _create_common_parser(subp, "convert", help="Convert a BED file to a typed table.")
    convert_p.add_argument("output", help="Path to output table (.parquet, otherwise tab-delimited).")
    _add_on_error(convert_p)
    convert_p.set_defaults(func=_convert)

    # parse arguments
    args = argp.parse_args(args)

    # pull passed arguments/options as a string for printing
    cmd_str = _format_command(args, argp)

    try:
        version = f"v{metadata.version('bedrecord')}"
    except metadata.PackageNotFoundError:
        version = "vunknown"
    masthead = f"{title} {version}" + os.linesep

    # setup logging
    log = logging.getLogger("bedrecord")
    level = logging.DEBUG if args.verbose else logging.INFO
    propagate = log.propagate
    log.propagate = False
    remove_managed_memory_handlers(log)

    if not args.quiet:
        sys.stdout.write(masthead)
        sys.stdout.write(cmd_str + os.linesep)
        sys.stdout.write("Starting log..." + os.linesep)
        configure_memory_logger(log, stream=sys.stdout, level=level)

    # setup log file, but write PLINK-style command first
    log_file = f"{args.out}.log"
    with open(log_file, "w") as disk_log_stream:
        disk_log_stream.write(masthead)
        disk_log_stream.write(cmd_str + os.linesep)
        disk_log_stream.write("Starting log..." + os.linesep)
    configure_memory_logger(log, log_file=log_file, level=level)

    try:
        return args.func(args)
    except BedParseError as err:
        log.error(f"Failed to parse {args.bed}: {err}")
        return 1
    finally:
        remove_managed_memory_handlers(log)
        log.propagate = propagate


def run_cli():
    return _main(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(_main(sys.argv[1:]))
