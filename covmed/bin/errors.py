"""
Exceptions raised by covmed, everything fatal to a run subclasses CovmedError
"""


class CovmedError(Exception):
    """Base class for errors that abort the run"""


class AlignmentReadError(CovmedError):
    """BAM could not be opened or a record failed to decode"""


class IndexNotFoundError(CovmedError):
    """No .bai index found next to the BAM"""


class RegionFileError(CovmedError):
    """Region file missing or holding a malformed line"""


class InsufficientSamplesError(CovmedError):
    """Statistic requested over an empty sample buffer"""


class ZeroGenomeBasesError(CovmedError):
    """Total bases to estimate coverage over is zero"""
