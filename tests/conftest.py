# tests/conftest.py
"""Shared fixtures: a small RAW-DATA tree with two libraries."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Ensure src/ is importable when the package is not installed
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))


CHECKM_HEADER = (
    "Bin Id\tMarker lineage\t# genomes\t# markers\t# marker sets\t"
    "Completeness\tContamination\tStrain heterogeneity\n"
)


def checkm_row(bin_id: str, completeness: float, contamination: float) -> str:
    return f"{bin_id}\tk__Bacteria (UID203)\t5449\t104\t58\t{completeness:.2f}\t{contamination:.2f}\t0.00\n"


@pytest.fixture
def raw_dir(tmp_path: Path) -> Path:
    """RAW-DATA with DNA57 (two MAGs, one BIN, one unbinned) and DNA58 (no bins/ directory)."""
    raw = tmp_path / "RAW-DATA"
    raw.mkdir()
    (raw / "sample-translation.txt").write_text(
        "library\tculture\tnotes\n"
        "DNA57\tCO64\tfirst\n"
        "DNA58\tCO83\tsecond\n"
        "\n"
    )

    dna57 = raw / "DNA57"
    bins = dna57 / "bins"
    bins.mkdir(parents=True)
    (dna57 / "checkm.txt").write_text(
        CHECKM_HEADER
        + checkm_row("bin-1", 60.0, 2.0)
        + checkm_row("bin-2", 60.0, 6.0)
        + checkm_row("bin-3", 95.5, 0.5)
        + checkm_row("bin-unbinned", 99.0, 0.0)
    )
    (dna57 / "gtdb.gtdbtk.tax").write_text("bin-1\td__Bacteria;p__Firmicutes\n")
    (bins / "bin-1.fasta").write_text(">contig_1\nACGT\nAC\n>contig_2\nGGCC\n")
    (bins / "bin-2.fasta").write_text(">contig_1 len=4\nATAT\n")
    (bins / "bin-3.fasta").write_text(">contig_9\nGGGG\n")
    (bins / "bin-unbinned.fasta").write_text(">k141_7\nTTTT\n>k141_8\nAAAA\n")
    (bins / "notes.txt").write_text("not a bin\n")

    dna58 = raw / "DNA58"
    dna58.mkdir()
    (dna58 / "checkm.txt").write_text(CHECKM_HEADER)

    # Library without a culture mapping
    (raw / "DNA99" / "bins").mkdir(parents=True)
    return raw


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "COMBINED-DATA"
