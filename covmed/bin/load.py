"""
Functions relating to loading of the BAM, its index and region files
"""
from contextlib import contextmanager
import gzip
import logging
import os
import re
import zlib

import pysam

from .errors import (
    AlignmentReadError, IndexNotFoundError, RegionFileError
)
from .records import AlignmentRecord, ReferenceStats


log = logging.getLogger(__name__)

INTEGER = re.compile(r"[+-]?[0-9]+")


class LoadData():

    @staticmethod
    def locate_index(bam) -> str:
        """
        Find the BAI index for the given BAM, checking for <bam>.bai first
        then for the BAM name with its extension replaced (sample.bai)

        Parameters
        ----------
        bam : str
            path to BAM file

        Returns
        -------
        str
            path to index file

        Raises
        ------
        IndexNotFoundError
            neither index file exists
        """
        candidates = [f"{bam}.bai", f"{bam[:-4]}.bai"]

        for index in candidates:
            if os.path.exists(index):
                return index

        raise IndexNotFoundError(
            f"No index found for {bam}, looked for: {', '.join(candidates)}"
        )


    @staticmethod
    @contextmanager
    def open_bam(bam, index):
        """
        Open BAM with the given index, closing both on exit

        Parameters
        ----------
        bam : str
            path to BAM file
        index : str
            path to BAI index of the BAM

        Yields
        ------
        pysam.AlignmentFile
            opened BAM
        """
        try:
            bam_file = pysam.AlignmentFile(bam, 'rb', index_filename=index)
        except (OSError, ValueError) as err:
            raise AlignmentReadError(f"Error opening {bam}: {err}") from err

        try:
            yield bam_file
        finally:
            bam_file.close()


    @staticmethod
    def read_references(bam_file) -> list:
        """
        Get (name, length) of every reference listed in the BAM header,
        in header order so list position is the reference id
        """
        return list(zip(bam_file.references, bam_file.lengths))


    @staticmethod
    def read_reference_index(bam_file) -> dict:
        """
        Read per reference statistics from the BAM index.

        References with no reads have no statistics stored in a BAI index,
        these are left out so a lookup on their id misses.

        Parameters
        ----------
        bam_file : pysam.AlignmentFile
            BAM opened with its index

        Returns
        -------
        dict
            reference id -> ReferenceStats
        """
        try:
            index_stats = bam_file.get_index_statistics()
        except (OSError, ValueError) as err:
            raise AlignmentReadError(
                f"Error reading index statistics of {bam_file.filename}: {err}"
            ) from err

        reference_index = {}

        for ref_id, stats in enumerate(index_stats):
            if stats.total == 0:
                continue

            reference_index[ref_id] = ReferenceStats(
                length=bam_file.lengths[ref_id],
                mapped=stats.mapped
            )

        return reference_index


    @staticmethod
    def iter_records(bam_file):
        """
        Stream records from the BAM in file order without using the index

        Parameters
        ----------
        bam_file : pysam.AlignmentFile
            opened BAM

        Yields
        ------
        AlignmentRecord
            one per alignment in the file

        Raises
        ------
        AlignmentReadError
            a record could not be decoded
        """
        try:
            for segment in bam_file.fetch(until_eof=True):
                yield AlignmentRecord(
                    flag=segment.flag,
                    pos=segment.reference_start,
                    mate_pos=segment.next_reference_start,
                    end=segment.reference_end,
                    template_length=segment.template_length,
                    cigar=tuple(segment.cigartuples or ())
                )
        except (OSError, ValueError) as err:
            raise AlignmentReadError(
                f"Error reading records from {bam_file.filename}: {err}"
            ) from err


    @staticmethod
    def read_region_lengths(regions) -> int:
        """
        Sum the lengths of all intervals in a bed file, file may be gzipped.

        Any malformed line aborts the read, no partial total is returned.

        Parameters
        ----------
        regions : str
            path to bed file of chrom, start, end (zero-based, half-open)

        Returns
        -------
        int
            total number of bases covered by the intervals

        Raises
        ------
        RegionFileError
            file could not be read, a line has fewer than 3 fields or a
            non-integer start / end
        """
        opener = gzip.open if regions.endswith('.gz') else open
        total = 0

        try:
            with opener(regions, 'rt') as file:
                for line_no, line in enumerate(file, start=1):
                    line = line.rstrip('\r\n')
                    if not line:
                        continue

                    fields = line.split('\t', 4)

                    if len(fields) < 3:
                        raise RegionFileError(
                            f"{regions} line {line_no}: expected at least 3 "
                            f"tab separated fields, found {len(fields)}"
                        )

                    if not (
                        INTEGER.fullmatch(fields[1])
                        and INTEGER.fullmatch(fields[2])
                    ):
                        raise RegionFileError(
                            f"{regions} line {line_no}: start and end must "
                            f"be integers, found '{fields[1]}' and "
                            f"'{fields[2]}'"
                        )

                    start = int(fields[1])
                    end = int(fields[2])

                    total += end - start
        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as err:
            raise RegionFileError(
                f"Error reading region file {regions}: {err}"
            ) from err

        log.debug(f"{total} bases in regions from {regions}")

        return total
