"""
Functions relating to estimating coverage from index read counts and the
sampled read length
"""
import logging

from .errors import ZeroGenomeBasesError


log = logging.getLogger(__name__)


def sum_reference_stats(references, reference_index, bam) -> tuple:
    """
    Total the mapped reads and bases over all references in the BAM header.

    A reference missing from the index is warned about and adds no mapped
    reads, its length is still added to the genome bases.

    Parameters
    ----------
    references : list
        (name, length) tuples in header order
    reference_index : dict
        reference id -> ReferenceStats, ids may be missing
    bam : str
        BAM path, used in the warning

    Returns
    -------
    int
        total mapped reads
    int
        total bases of all references
    """
    mapped = 0
    genome_bases = 0

    for ref_id, (name, length) in enumerate(references):
        genome_bases += length

        stats = reference_index.get(ref_id)
        if stats is None:
            log.warning(f"chromosome: {name} not found in {bam}")
            continue

        mapped += stats.mapped

    return mapped, genome_bases


def estimate_coverage(mapped, read_length_median, genome_bases) -> float:
    """
    Estimate depth as mapped reads * median read length / total bases

    Parameters
    ----------
    mapped : int
        total mapped reads
    read_length_median : float
        median sampled read length, from stats.median_read_length()
    genome_bases : int
        bases the reads are spread over, either the genome length or the
        total length of the target regions

    Returns
    -------
    float
        estimated coverage

    Raises
    ------
    ZeroGenomeBasesError
        genome_bases is 0
    """
    if genome_bases == 0:
        raise ZeroGenomeBasesError(
            "Total bases to estimate coverage over is 0, check the BAM "
            "header or region file"
        )

    return mapped * read_length_median / genome_bases
