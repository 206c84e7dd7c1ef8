"""
Functions relating to sampling reads from the BAM and generating read
length, insert size and template length stats from the samples
"""
from dataclasses import dataclass, field
import logging
from typing import List

import numpy as np

from .errors import InsufficientSamplesError


log = logging.getLogger(__name__)


@dataclass
class SampleSet():
    """
    Capped buffers filled by a single pass over the BAM records
    """
    read_lengths: List[int] = field(default_factory=list)
    insert_sizes: List[int] = field(default_factory=list)
    template_lengths: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class Sizes():
    """
    Summary of the sampled sizes of a BAM
    """
    insert_mean: float
    insert_sd: float
    template_mean: float
    template_sd: float
    read_length_mean: float
    read_length_median: float

    def __str__(self) -> str:
        return (
            f"{self.insert_mean:.2f}\t{self.insert_sd:.2f}\t"
            f"{self.template_mean:.2f}\t{self.template_sd:.2f}"
        )


def _as_array(values, name) -> np.ndarray:
    """
    Convert sample buffer to an array, refusing to work on an empty buffer
    """
    if len(values) == 0:
        raise InsufficientSamplesError(
            f"Insufficient samples: no {name} were sampled from the BAM"
        )

    return np.asarray(values, dtype=np.float64)


def mean(values, name='values') -> float:
    return float(np.mean(_as_array(values, name)))


def population_std(values, name='values') -> float:
    """
    Standard deviation dividing by the number of values (ddof=0),
    not by n - 1
    """
    return float(np.std(_as_array(values, name), ddof=0))


def median_read_length(values, name='read lengths') -> float:
    """
    Lower median of the sampled read lengths, minus one.

    The value at index (n - 1) // 2 of the sorted lengths is taken, so for
    an even number of values the lower of the two middle values is used.
    One is then subtracted: the length as counted here is treated as one
    past the zero-based end coordinate of the read, and the coverage
    estimate is defined on the length less that one base. This offset is a
    fixed convention of the estimate and is applied on every call.

    Parameters
    ----------
    values : list
        sampled read lengths

    Returns
    -------
    float
        median read length - 1

    Raises
    ------
    InsufficientSamplesError
        no read lengths were sampled
    """
    lengths = np.sort(_as_array(values, name))

    return float(lengths[(len(lengths) - 1) // 2]) - 1


class Sample():
    """
    Samples reads from a stream of BAM records and generates size stats
    """
    def collect(self, records, sample_size) -> SampleSet:
        """
        Single pass over the records filling the read length, insert size
        and template length buffers, each holding at most sample_size values.

        Secondary, supplementary, unmapped and QC fail records are skipped
        before either buffer sees them. Every remaining record adds its read
        length until that buffer is full. Records that are the leftmost
        mate of a proper pair with a single match cigar block add the gap
        to their mate (insert size) and the template length.

        Reading stops once the insert size buffer is full or the records
        run out, so the read length buffer holds whatever was seen up to
        then. The records are only iterated once and need not be
        rewindable.

        Parameters
        ----------
        records : iterable
            AlignmentRecord objects in file order
        sample_size : int
            maximum number of values per buffer, must be > 0

        Returns
        -------
        SampleSet
            filled sample buffers
        """
        if sample_size <= 0:
            raise ValueError(f"sample_size must be > 0, got {sample_size}")

        samples = SampleSet()

        for record in records:
            if record.is_excluded():
                continue

            if len(samples.read_lengths) < sample_size:
                samples.read_lengths.append(record.query_length())

            if (
                record.pos < record.mate_pos
                and record.is_proper_pair()
                and record.is_single_match()
            ):
                samples.insert_sizes.append(record.mate_pos - record.end)
                samples.template_lengths.append(record.template_length)

                if len(samples.insert_sizes) >= sample_size:
                    break

        log.debug(
            f"Sampled {len(samples.read_lengths)} read lengths and "
            f"{len(samples.insert_sizes)} insert sizes"
        )

        return samples


    def calculate_sizes(self, samples) -> Sizes:
        """
        Calculate mean and standard deviation of insert sizes and template
        lengths, and mean and median of read lengths

        Parameters
        ----------
        samples : SampleSet
            buffers from Sample.collect()

        Returns
        -------
        Sizes
            summary of sampled sizes

        Raises
        ------
        InsufficientSamplesError
            any of the buffers is empty
        """
        return Sizes(
            insert_mean=mean(samples.insert_sizes, 'insert sizes'),
            insert_sd=population_std(samples.insert_sizes, 'insert sizes'),
            template_mean=mean(
                samples.template_lengths, 'template lengths'),
            template_sd=population_std(
                samples.template_lengths, 'template lengths'),
            read_length_mean=mean(samples.read_lengths, 'read lengths'),
            read_length_median=median_read_length(samples.read_lengths)
        )
