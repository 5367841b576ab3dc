"""
FASTA parsing and length/GC statistics.

The statistics are computed over a whole file held in memory. Input that is
empty, malformed or contains characters other than A, C, G, T (either case)
and spaces in its sequence lines yields the all-zero Statistics rather than an
error, so batch runs over many files never stop on one bad file.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN
import logging
from typing import Iterable, Iterator, List, Tuple

from xopen import xopen

logger = logging.getLogger(__name__)

HEADER_MARKER = ">"
NUCLEOTIDES = frozenset("ACGTacgt")
GC_BASES = frozenset("GCgc")
ALLOWED_SEQUENCE_CHARACTERS = NUCLEOTIDES | {" "}
THREE_PLACES = Decimal("0.001")


@dataclass
class Record:
    header: str
    sequence: str = ""

    @property
    def length(self) -> int:
        return count_nucleotides(self.sequence)


@dataclass
class FastaFile:
    records: List[Record] = field(default_factory=list)
    sequence_lines: List[str] = field(default_factory=list)
    malformed: bool = False


@dataclass(frozen=True)
class Statistics:
    sequence_count: int
    total_length: int
    longest: int
    shortest: int
    mean_length: Decimal
    gc_percent: Decimal
    lengths: Tuple[int, ...] = ()

    @classmethod
    def empty(cls) -> "Statistics":
        return cls(0, 0, 0, 0, Decimal(0), Decimal(0))

    @property
    def is_empty(self) -> bool:
        return self.sequence_count == 0


def count_nucleotides(sequence: str) -> int:
    return sum(1 for char in sequence if char in NUCLEOTIDES)


def count_gc(sequence: str) -> int:
    return sum(1 for char in sequence if char in GC_BASES)


def truncate(value: Decimal) -> Decimal:
    """Cut a decimal down to three places, the way `bc` with scale=3 does."""
    return value.quantize(THREE_PLACES, rounding=ROUND_DOWN)


def split_lines(text: str) -> List[str]:
    """
    Split text on line feeds only, dropping one trailing carriage return per line.

    Other characters that str.splitlines treats as line breaks (form feed,
    vertical tab, ...) stay inside their line. A final terminator adds no line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse(text: str) -> FastaFile:
    """
    Split FASTA text into records.

    Lines after a header are joined verbatim into that record's sequence. Each
    non-header line is also kept as written for validation. Non-blank lines
    before the first header mark the file as malformed.
    """
    fasta = FastaFile()
    chunks: List[List[str]] = []
    for line in split_lines(text):
        if line.startswith(HEADER_MARKER):
            fasta.records.append(Record(header=line[len(HEADER_MARKER):]))
            chunks.append([])
            continue

        fasta.sequence_lines.append(line)
        if not chunks:
            if line.strip():
                fasta.malformed = True
            continue
        chunks[-1].append(line)

    for record, pieces in zip(fasta.records, chunks):
        record.sequence = "".join(pieces)
    return fasta


def validate(fasta: FastaFile) -> bool:
    return all(set(line) <= ALLOWED_SEQUENCE_CHARACTERS for line in fasta.sequence_lines)


def compute(fasta: FastaFile) -> Statistics:
    """Statistics for a parsed file that passed validate()."""
    lengths = tuple(record.length for record in fasta.records)
    total_length = sum(lengths)
    if not lengths or total_length == 0:
        return Statistics.empty()

    gc_count = sum(count_gc(record.sequence) for record in fasta.records)
    return Statistics(
        sequence_count=len(lengths),
        total_length=total_length,
        longest=max(lengths),
        shortest=min(lengths),
        mean_length=truncate(Decimal(total_length) / Decimal(len(lengths))),
        gc_percent=truncate(Decimal(gc_count * 100) / Decimal(total_length)),
        lengths=lengths,
    )


def fasta_statistics(text: str) -> Statistics:
    fasta = parse(text)
    if not fasta.records:
        return Statistics.empty()

    if fasta.malformed:
        logger.debug("Sequence lines found before the first header")
        return Statistics.empty()

    if not validate(fasta):
        return Statistics.empty()

    return compute(fasta)


def read_fasta_text(path) -> str:
    """Read a (possibly compressed) FASTA file into memory."""
    with xopen(path, "r", encoding="utf-8", errors="replace", newline="") as fh:
        return fh.read()


REPORT_LABELS = (
    "Number of sequences",
    "Total length of sequences",
    "Length of the longest sequence",
    "Length of the shortest sequence",
    "Average sequence length",
    "GC Content (%)",
)


def format_report(stats: Statistics) -> str:
    if stats.is_empty:
        values = ["0"] * len(REPORT_LABELS)
    else:
        values = [
            str(stats.sequence_count),
            str(stats.total_length),
            str(stats.longest),
            str(stats.shortest),
            f"{stats.mean_length:.3f}",
            f"{stats.gc_percent:.3f}",
        ]

    lines = ["FASTA File Statistics:", "-" * 22]
    lines.extend(f"{label}: {value}" for label, value in zip(REPORT_LABELS, values))
    return "\n".join(lines) + "\n"


def relabel_lines(lines: Iterable[str], prefix: str) -> Iterator[str]:
    """
    Prefix every header in lines with `prefix` and an underscore. Sequence lines pass through.

    Yielded lines carry no line terminator.
    """
    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith(HEADER_MARKER):
            yield f"{HEADER_MARKER}{prefix}_{line[len(HEADER_MARKER):]}"
        else:
            yield line
