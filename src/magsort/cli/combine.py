"""
Collect genome bins of all samples into one directory with unique names and headers.

Reads RAW-DATA/<library>/bins/*.fasta for every library listed in the sample
translation table and classifies each bin with the CheckM table of its library:

  MAG       completeness >= 50 and contamination < 5
  BIN       any other bin, including bins without CheckM data
  UNBINNED  files with "unbinned" in their name

Outputs in the output directory:
 - <culture>_MAG_NNN.fa, <culture>_BIN_NNN.fa, <culture>_UNBINNED.fa with each
   header rewritten to ><culture>_<class>_NNN_<header> (><culture>_UNBINNED_<header>)
 - <culture>-CHECKM.txt and <culture>-GTDB-TAX.txt copied from the library directory

MAGs and BINs are numbered independently per library in the order the bin files
are listed by the file system, or by name with --sort-bins.
"""
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import shutil
from typing import Dict, List

from xopen import xopen

from magsort.errors import FatalPrecondition, SkippedItem
from magsort.fasta import relabel_lines, split_lines
from magsort.tables import BinClass, classify_bin, is_unbinned, load_culture_mapping, load_quality_table
from magsort.utils import Summary, tqdm

logger = logging.getLogger(__name__)

DEFAULT_RAW_DIR = "RAW-DATA"
DEFAULT_OUTPUT_DIR = "COMBINED-DATA"
DEFAULT_TRANSLATION = "sample-translation.txt"
CHECKM_FILE = "checkm.txt"
GTDB_FILE = "gtdb.gtdbtk.tax"
BINS_DIR = "bins"
BIN_SUFFIX = ".fasta"
OUTPUT_SUFFIX = ".fa"
LISTED_FILES = 20
# Bytes that are not UTF-8 are carried through unchanged
TEXT_ERRORS = "surrogateescape"


@dataclass
class CombineResult:
    written: List[Path] = field(default_factory=list)
    warnings: List[SkippedItem] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)


def main(args):
    try:
        result = combine(
            raw_dir=args.raw_dir,
            output_dir=args.output_dir,
            translation=args.translation,
            sort_bins=args.sort_bins,
        )
    except FatalPrecondition as e:
        logger.error("%s", e)
        return 1

    result.summary.print_stats(name=__name__)
    print_output_listing(Path(args.output_dir))
    return 0


def combine(raw_dir, output_dir, translation=None, sort_bins: bool = False) -> CombineResult:
    raw_dir = Path(raw_dir)
    output_dir = Path(output_dir)
    if not raw_dir.is_dir():
        raise FatalPrecondition(f"Raw data directory not found: {raw_dir}", raw_dir)

    translation = Path(translation) if translation else raw_dir / DEFAULT_TRANSLATION
    culture_map = load_culture_mapping(translation)

    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Writing combined data to %s", output_dir)

    result = CombineResult()
    sample_dirs = sorted(path for path in raw_dir.iterdir() if path.is_dir() and not is_hidden(path.name))
    for sample_dir in tqdm(sample_dirs, desc="Processing samples", unit=" samples"):
        library = sample_dir.name
        culture = culture_map.get(library)
        if culture is None:
            warn(result, library, sample_dir, "no culture mapping found, skipping")
            continue

        logger.info("Processing library %s (%s)", library, culture)
        result.summary["Samples processed"] += 1
        copy_metadata(sample_dir, culture, output_dir, result)
        process_bins(sample_dir, culture, output_dir, result, sort_bins=sort_bins)

    logger.info("Finished")
    return result


def warn(result: CombineResult, sample, path: Path, reason: str):
    item = SkippedItem(sample=sample, path=path, reason=reason)
    logger.warning("%s", item)
    result.warnings.append(item)
    result.summary["Warnings"] += 1


def copy_metadata(sample_dir: Path, culture: str, output_dir: Path, result: CombineResult):
    for source_name, target_name in ((CHECKM_FILE, f"{culture}-CHECKM.txt"),
                                     (GTDB_FILE, f"{culture}-GTDB-TAX.txt")):
        source = sample_dir / source_name
        if not source.is_file():
            warn(result, sample_dir.name, source, f"{source_name} not found")
            continue
        target = output_dir / target_name
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            warn(result, sample_dir.name, source, f"could not copy {source_name}: {e}")
            continue
        result.written.append(target)
        result.summary["Metadata files copied"] += 1
        logger.debug("Copied %s -> %s", source, target)


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def list_bin_files(bins_dir: Path, sort_bins: bool = False) -> List[Path]:
    """Bin FASTA files in the order the file system lists them, or sorted by name."""
    with os.scandir(bins_dir) as entries:
        files = [Path(entry.path) for entry in entries
                 if entry.name.endswith(BIN_SUFFIX) and not is_hidden(entry.name) and entry.is_file()]
    if sort_bins:
        files.sort(key=lambda path: path.name)
    return files


def process_bins(sample_dir: Path, culture: str, output_dir: Path, result: CombineResult,
                 sort_bins: bool = False):
    library = sample_dir.name
    bins_dir = sample_dir / BINS_DIR
    if not bins_dir.is_dir():
        warn(result, library, bins_dir, f"{BINS_DIR}/ directory not found")
        return

    checkm_file = sample_dir / CHECKM_FILE
    quality = load_quality_table(checkm_file) if checkm_file.is_file() else {}

    counters: Dict[BinClass, int] = {BinClass.MAG: 0, BinClass.BIN: 0}
    for fasta in tqdm(list_bin_files(bins_dir, sort_bins), desc=f"Bins of {library}", unit=" bins"):
        bin_name = fasta.name[:-len(BIN_SUFFIX)]
        try:
            with xopen(fasta, "r", errors=TEXT_ERRORS, newline="") as fh:
                lines = split_lines(fh.read())
        except (OSError, EOFError) as e:
            warn(result, library, fasta, f"could not read bin: {e}")
            continue

        bin_quality = None
        if not is_unbinned(bin_name):
            bin_quality = quality.get(bin_name)
            if bin_quality is None:
                warn(result, library, fasta, f"no CheckM data for {bin_name}, classified as BIN")

        bin_class = classify_bin(bin_name, bin_quality)
        if bin_class is BinClass.UNBINNED:
            label = f"{culture}_{bin_class.value}"
        else:
            counters[bin_class] += 1
            label = f"{culture}_{bin_class.value}_{counters[bin_class]:03d}"

        output_file = output_dir / f"{label}{OUTPUT_SUFFIX}"
        try:
            write_relabeled(lines, label, output_file)
        except OSError as e:
            warn(result, library, fasta, f"could not write {output_file.name}: {e}")
            if bin_class is not BinClass.UNBINNED:
                counters[bin_class] -= 1
            continue
        result.written.append(output_file)
        result.summary[f"{bin_class.value} files written"] += 1
        logger.info("%s -> %s (%s)", bin_name, output_file.name, describe_quality(bin_class, bin_quality))


def describe_quality(bin_class: BinClass, quality) -> str:
    if bin_class is BinClass.UNBINNED:
        return "unbinned sequences"
    if quality is None:
        return "no CheckM data available"
    return f"Completion={quality.completeness}%, Contamination={quality.contamination}%"


def write_relabeled(lines, label: str, output_file: Path):
    with xopen(output_file, "w", errors=TEXT_ERRORS) as out:
        for line in relabel_lines(lines, label):
            out.write(line + "\n")


def print_output_listing(output_dir: Path, listed: int = LISTED_FILES):
    names = sorted(os.listdir(output_dir))
    print(f"Total files in {output_dir}: {len(names)}")
    for name in names[:listed]:
        print(f"  {name}")
    if len(names) > listed:
        print(f"  ... and {len(names) - listed} more files")


def add_arguments(parser):
    parser.add_argument(
        "-r", "--raw-dir", default=DEFAULT_RAW_DIR,
        help="Directory with one subdirectory per library. Default: %(default)s."
    )
    parser.add_argument(
        "-o", "--output-dir", default=DEFAULT_OUTPUT_DIR,
        help="Directory to collect relabeled bins and metadata in. Default: %(default)s."
    )
    parser.add_argument(
        "-t", "--translation", default=None,
        help=f"Tab-separated library -> culture table. Default: <raw-dir>/{DEFAULT_TRANSLATION}."
    )
    parser.add_argument(
        "--sort-bins", action="store_true", default=False,
        help="Number bins in order of their file names instead of file system listing order."
    )
