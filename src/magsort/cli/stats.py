"""
Print sequence count, length and GC content statistics for FASTA files.

Each file is read whole into memory. Files that are empty or contain characters
other than A, C, G, T and spaces in their sequence lines are reported with all
values set to 0.
"""
import logging
import sys

from magsort.fasta import fasta_statistics, format_report, read_fasta_text

logger = logging.getLogger(__name__)


def main(args):
    return run_stats(args.fasta, output=sys.stdout)


def run_stats(paths, output=None) -> int:
    output = sys.stdout if output is None else output
    failed = 0
    for path in paths:
        try:
            text = read_fasta_text(path)
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            failed += 1
            continue

        stats = fasta_statistics(text)
        logger.debug("%s: %d sequences, %d nucleotides", path, stats.sequence_count, stats.total_length)
        output.write(format_report(stats))

    return 1 if failed else 0


def add_arguments(parser):
    parser.add_argument(
        "fasta", nargs="+",
        help="FASTA file(s) to summarize. Gzip compressed files are accepted."
    )
