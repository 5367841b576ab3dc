"""
Readers for the tab-separated inputs of the combine pipeline and the bin quality rule.

- sample translation table: library, culture, ... (header row, extra columns ignored)
- CheckM table: Bin Id, Marker lineage, # genomes, # markers, # marker sets,
  Completeness, Contamination, Strain heterogeneity
"""
from enum import Enum
import csv
import logging
from pathlib import Path
from typing import Dict, NamedTuple, Optional

import pandas as pd
from pandas.errors import EmptyDataError

from magsort.errors import FatalPrecondition

logger = logging.getLogger(__name__)

CHECKM_HEADER_SENTINEL = "Bin Id"
CHECKM_COLUMNS = {0: "bin_id", 5: "completeness", 6: "contamination"}
MIN_MAG_COMPLETENESS = 50.0
MAX_MAG_CONTAMINATION = 5.0
UNBINNED_MARKER = "unbinned"


class BinClass(Enum):
    MAG = "MAG"
    BIN = "BIN"
    UNBINNED = "UNBINNED"


class Quality(NamedTuple):
    completeness: float
    contamination: float


def load_culture_mapping(tsv_path) -> Dict[str, str]:
    """Return the library -> culture mapping. Raises FatalPrecondition if the table is missing."""
    tsv_path = Path(tsv_path)
    if not tsv_path.is_file():
        raise FatalPrecondition(f"Sample translation table not found: {tsv_path}", tsv_path)

    mapping = {}
    with tsv_path.open(newline="") as fh:
        for row in csv.reader(fh, delimiter="\t"):
            if len(row) < 2:
                continue
            library, culture = row[0].strip(), row[1].strip()
            if not library or library == "library" or not culture:
                continue
            mapping[library] = culture
            logger.debug("Mapped: %s -> %s", library, culture)

    logger.info("Loaded %d sample mappings", len(mapping))
    return mapping


def load_quality_table(checkm_file) -> Dict[str, Quality]:
    """
    Read completeness and contamination per bin from a CheckM table.

    Rows starting with the "Bin Id" header, rows without a bin id and rows
    whose values are not numbers are left out.
    """
    try:
        df = pd.read_csv(checkm_file, sep="\t", header=None, usecols=list(CHECKM_COLUMNS),
                         dtype=str, skip_blank_lines=True)
    except EmptyDataError:
        return {}
    except ValueError as e:
        logger.warning("Could not read quality columns from %s: %s", checkm_file, e)
        return {}

    df = df.rename(columns=CHECKM_COLUMNS)
    df = df.dropna(subset=["bin_id"])
    df["bin_id"] = df["bin_id"].str.strip()
    df = df[(df["bin_id"] != "") & ~df["bin_id"].str.startswith(CHECKM_HEADER_SENTINEL)].copy()
    for column in ("completeness", "contamination"):
        df[column] = pd.to_numeric(df[column], errors="coerce")
    df = df.dropna(subset=["completeness", "contamination"])

    quality = {}
    for bin_id, completeness, contamination in zip(df["bin_id"], df["completeness"], df["contamination"]):
        quality[bin_id] = Quality(float(completeness), float(contamination))
        logger.debug("%s: Completion=%s%%, Contamination=%s%%", bin_id, completeness, contamination)
    return quality


def is_unbinned(bin_name: str) -> bool:
    return UNBINNED_MARKER in bin_name


def classify_bin(bin_name: str, quality: Optional[Quality]) -> BinClass:
    """
    UNBINNED for names containing "unbinned", whatever the quality says. MAG for
    completeness >= 50 and contamination < 5. BIN otherwise, also when quality is unknown.
    """
    if is_unbinned(bin_name):
        return BinClass.UNBINNED
    if quality is None:
        return BinClass.BIN
    if quality.completeness >= MIN_MAG_COMPLETENESS and quality.contamination < MAX_MAG_CONTAMINATION:
        return BinClass.MAG
    return BinClass.BIN
