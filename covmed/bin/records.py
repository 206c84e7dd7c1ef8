"""
Data types shared between loading the alignment inputs and sampling them
"""
from dataclasses import dataclass
from typing import Tuple


# SAM flag bits used when filtering records
PROPER_PAIR = 0x2
UNMAPPED = 0x4
SECONDARY = 0x100
QC_FAIL = 0x200
SUPPLEMENTARY = 0x800

EXCLUDE_FLAGS = SECONDARY | SUPPLEMENTARY | UNMAPPED | QC_FAIL

# cigar operation codes as numbered in the SAM format and pysam
CIGAR_MATCH = 0
CIGAR_INS = 1
CIGAR_DEL = 2
CIGAR_REF_SKIP = 3
CIGAR_SOFT_CLIP = 4
CIGAR_HARD_CLIP = 5
CIGAR_PAD = 6
CIGAR_EQUAL = 7
CIGAR_DIFF = 8

QUERY_CONSUMING = frozenset(
    [CIGAR_MATCH, CIGAR_INS, CIGAR_SOFT_CLIP, CIGAR_EQUAL, CIGAR_DIFF]
)


@dataclass(frozen=True)
class AlignmentRecord():
    """
    Single alignment as needed for sampling sizes, positions are zero-based
    """
    flag: int
    pos: int
    mate_pos: int
    end: int
    template_length: int
    cigar: Tuple[Tuple[int, int], ...] = ()

    def query_length(self) -> int:
        """
        Number of read bases consumed by the cigar (hard clips excluded)
        """
        return sum(
            length for op, length in self.cigar if op in QUERY_CONSUMING
        )

    def is_excluded(self) -> bool:
        return bool(self.flag & EXCLUDE_FLAGS)

    def is_proper_pair(self) -> bool:
        return self.flag & PROPER_PAIR == PROPER_PAIR

    def is_single_match(self) -> bool:
        """
        True if the alignment is one match block with no clipping or indels
        """
        return len(self.cigar) == 1 and self.cigar[0][0] == CIGAR_MATCH


@dataclass(frozen=True)
class ReferenceStats():
    """
    Index derived totals for one reference sequence
    """
    length: int
    mapped: int
