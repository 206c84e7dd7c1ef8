"""
Main script to control running of covmed
"""
import logging
import sys

from covmed.bin import arguments, coverage, load, stats
from covmed.bin.errors import CovmedError


log = logging.getLogger(__name__)


class SubCommands():
    """
    Functions for the individual parts of a run, called in order by run()
    """

    @staticmethod
    def sample_sizes(bam_file, sample_size) -> stats.Sizes:
        """
        Calls functions to sample reads from the BAM and generate size stats

        Parameters
        ----------
        bam_file : pysam.AlignmentFile
            opened BAM
        sample_size : int
            maximum number of reads per sample buffer

        Returns
        -------
        stats.Sizes
            insert size, template length and read length stats
        """
        samples = stats.Sample().collect(
            records=load.LoadData().iter_records(bam_file),
            sample_size=sample_size
        )

        return stats.Sample().calculate_sizes(samples)


    @staticmethod
    def count_bases(bam_file, config) -> tuple:
        """
        Calls functions to total mapped reads from the index and the bases
        the reads are spread over

        Parameters
        ----------
        bam_file : pysam.AlignmentFile
            BAM opened with its index
        config : arguments.Config
            run configuration

        Returns
        -------
        int
            total mapped reads
        int
            genome length, or total region length if regions given
        """
        mapped, genome_bases = coverage.sum_reference_stats(
            references=load.LoadData().read_references(bam_file),
            reference_index=load.LoadData().read_reference_index(bam_file),
            bam=config.bam
        )

        if config.regions:
            genome_bases = load.LoadData().read_region_lengths(config.regions)

        return mapped, genome_bases


def run(config) -> tuple:
    """
    Estimate coverage and sizes for the BAM given in the config

    Parameters
    ----------
    config : arguments.Config
        run configuration

    Returns
    -------
    float
        estimated coverage
    stats.Sizes
        sampled size stats
    """
    index = load.LoadData().locate_index(config.bam)

    with load.LoadData().open_bam(config.bam, index) as bam_file:
        mapped, genome_bases = SubCommands().count_bases(bam_file, config)
        sizes = SubCommands().sample_sizes(bam_file, config.sample_size)

    depth = coverage.estimate_coverage(
        mapped=mapped,
        read_length_median=sizes.read_length_median,
        genome_bases=genome_bases
    )

    return depth, sizes


def main(argv=None):
    """
    Main function to do all things covmed
    """
    config = arguments.parse_args(argv)

    logging.basicConfig(
        format='%(asctime)s %(levelname)s %(message)s',
        level=logging.INFO,
        stream=sys.stderr
    )
    log.info(config.bam)

    try:
        depth, sizes = run(config)
    except CovmedError as err:
        sys.exit(f"Error: {err}")

    print(f"{depth:.2f}\t{sizes}")


if __name__ == "__main__":
    main()
