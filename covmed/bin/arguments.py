import argparse
from dataclasses import dataclass
from typing import Optional

from covmed import __version__


@dataclass(frozen=True)
class Config():
    """
    Settings for a single run, built once from the command line

    Attributes
    ----------
    bam : str
        path to coordinate sorted and indexed BAM
    regions : str | None
        optional bed file of target regions
    sample_size : int
        maximum number of reads to sample for each size buffer
    """
    bam: str
    regions: Optional[str] = None
    sample_size: int = 100000


def positive_int(value) -> int:
    """
    argparse type for the sample size, must be an integer > 0

    Parameters
    ----------
    value : str
        value passed on the command line

    Returns
    -------
    int
        parsed value

    Raises
    ------
    argparse.ArgumentTypeError
        value is not a positive integer
    """
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: '{value}'")

    if number <= 0:
        raise argparse.ArgumentTypeError(
            f"sample size must be greater than 0, got {number}"
        )

    return number


def parse_args(argv=None) -> Config:
    """
    Parse cmd line arguments

    Parameters
    ----------
    argv : list | None
        arguments to parse, defaults to sys.argv[1:]

    Returns
    -------
    Config
        immutable run configuration
    """
    parser = argparse.ArgumentParser(
        description=(
            'Estimate coverage and insert size statistics from a sample of '
            'reads in an indexed BAM.'
        )
    )

    parser = generic_arguments(parser)
    args = parser.parse_args(argv)

    return Config(
        bam=args.bam,
        regions=args.regions,
        sample_size=args.sample_size
    )


def generic_arguments(parser):
    """
    Arguments for the single running mode

    Parameters
    ----------
    parser : argparse.ArgumentParser
        parser to add arguments to

    Returns
    -------
    argparse.ArgumentParser
        parser with arguments added
    """
    parser.add_argument(
        'bam',
        help='bam for which to estimate coverage'
    )
    parser.add_argument(
        'regions', nargs='?', default=None,
        help=(
            'optional bed file to specify target regions, if given the total '
            'length of the regions replaces the genome length'
        )
    )
    parser.add_argument(
        '-n', '--sample_size', type=positive_int, default=100000,
        help='number of reads to sample for length (default: 100000)'
    )
    parser.add_argument(
        '--version', action='version', version=f'%(prog)s {__version__}'
    )

    return parser
