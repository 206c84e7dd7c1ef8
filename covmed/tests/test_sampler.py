import itertools
import os
import sys
from unittest import TestCase


sys.path.append(os.path.abspath(
    os.path.join(os.path.realpath(__file__), '../../../')
))

from covmed.bin import records, stats
from covmed.bin.errors import AlignmentReadError
from covmed.bin.records import AlignmentRecord


PAIRED = records.PROPER_PAIR | 0x1 | 0x40


def pair(pos=100, mate_pos=300, length=100, tlen=300, flag=PAIRED):
    """
    Leftmost mate of a proper pair with a single match block
    """
    return AlignmentRecord(
        flag=flag, pos=pos, mate_pos=mate_pos, end=pos + length,
        template_length=tlen, cigar=((records.CIGAR_MATCH, length),)
    )


def single(length=100, flag=0, cigar=None):
    """
    Mapped record that never qualifies as a pair
    """
    return AlignmentRecord(
        flag=flag, pos=100, mate_pos=-1, end=100 + length,
        template_length=0,
        cigar=((records.CIGAR_MATCH, length),) if cigar is None else cigar
    )


class TestQueryLength(TestCase):
    """
    Tests for AlignmentRecord.query_length
    """

    def test_hard_clip_and_deletion_not_counted(self):
        record = single(cigar=(
            (records.CIGAR_HARD_CLIP, 5), (records.CIGAR_SOFT_CLIP, 10),
            (records.CIGAR_MATCH, 50), (records.CIGAR_DEL, 3),
            (records.CIGAR_INS, 2), (records.CIGAR_EQUAL, 20),
            (records.CIGAR_DIFF, 1), (records.CIGAR_REF_SKIP, 100)
        ))

        self.assertEqual(record.query_length(), 83)

    def test_no_cigar(self):
        self.assertEqual(single(cigar=()).query_length(), 0)

    def test_record_hashable(self):
        """
        Test records are immutable values usable as set members
        """
        self.assertEqual(len({pair(), pair(), single()}), 2)


class TestCollect(TestCase):
    """
    Tests for stats.Sample.collect

    Single pass filling the read length buffer for every kept record and
    the insert / template buffers for qualifying pairs, stopping once the
    insert buffer is full
    """

    def test_pair_sizes(self):
        """
        Test insert size is mate position minus alignment end and the
        template length is kept as is
        """
        samples = stats.Sample().collect(
            [pair(pos=100, mate_pos=350, length=100, tlen=-350)], 10
        )

        self.assertEqual(samples.read_lengths, [100])
        self.assertEqual(samples.insert_sizes, [150])
        self.assertEqual(samples.template_lengths, [-350])

    def test_excluded_flags_never_sampled(self):
        """
        Test every combination of the excluded flags with the other flags
        keeps the record out of all buffers
        """
        excluded = [
            records.SECONDARY, records.SUPPLEMENTARY,
            records.UNMAPPED, records.QC_FAIL
        ]
        others = [records.PROPER_PAIR, 0x1, 0x10, 0x40, 0x80, 0x400]

        for n_excluded in range(1, len(excluded) + 1):
            for bad in itertools.combinations(excluded, n_excluded):
                for n_other in range(len(others) + 1):
                    for good in itertools.combinations(others, n_other):
                        flag = sum(bad) | sum(good)
                        samples = stats.Sample().collect(
                            [pair(flag=flag), single(flag=flag)], 5
                        )

                        self.assertEqual(samples, stats.SampleSet())

    def test_non_qualifying_pairs(self):
        """
        Test records only add read lengths when they are not the leftmost
        mate, not a proper pair or have more than a single match block
        """
        clipped = AlignmentRecord(
            flag=PAIRED, pos=100, mate_pos=300, end=190, template_length=300,
            cigar=((records.CIGAR_SOFT_CLIP, 10), (records.CIGAR_MATCH, 90))
        )
        deletion = AlignmentRecord(
            flag=PAIRED, pos=100, mate_pos=300, end=201, template_length=300,
            cigar=(
                (records.CIGAR_MATCH, 50), (records.CIGAR_DEL, 1),
                (records.CIGAR_MATCH, 50)
            )
        )
        equal_only = AlignmentRecord(
            flag=PAIRED, pos=100, mate_pos=300, end=200, template_length=300,
            cigar=((records.CIGAR_EQUAL, 100),)
        )
        cases = {
            'rightmost mate': pair(pos=300, mate_pos=100),
            'same position': pair(pos=100, mate_pos=100),
            'not proper pair': pair(flag=0x1 | 0x40),
            'clipped': clipped,
            'deletion': deletion,
            'sequence match op': equal_only,
        }

        for name, record in cases.items():
            with self.subTest(name):
                samples = stats.Sample().collect([record], 5)

                self.assertEqual(
                    samples.read_lengths, [record.query_length()]
                )
                self.assertEqual(samples.insert_sizes, [])
                self.assertEqual(samples.template_lengths, [])

    def test_stops_when_insert_buffer_full(self):
        """
        Test the pass stops as soon as the insert buffer holds N values,
        leaving later records unread
        """
        consumed = []

        def stream():
            for i in range(10):
                consumed.append(i)
                yield pair(pos=i, mate_pos=1000)

        samples = stats.Sample().collect(stream(), 3)

        self.assertEqual(consumed, [0, 1, 2])
        self.assertEqual(len(samples.insert_sizes), 3)
        self.assertEqual(len(samples.template_lengths), 3)
        self.assertEqual(len(samples.read_lengths), 3)

    def test_read_lengths_stop_at_cap_while_pairs_continue(self):
        """
        Test read lengths stop at N but reading continues until the insert
        buffer fills
        """
        stream = [single(length=50)] * 5 + [pair(length=75)] * 3

        samples = stats.Sample().collect(stream, 3)

        self.assertEqual(samples.read_lengths, [50, 50, 50])
        self.assertEqual(len(samples.insert_sizes), 3)

    def test_read_lengths_partial_when_pairs_fill_first(self):
        """
        Test the read length buffer can end below N when pairs fill the
        insert buffer first, mixing in filtered records that add nothing
        """
        stream = [
            pair(length=90),
            single(flag=records.SECONDARY, length=10),
            pair(length=80),
            single(length=70),
        ]

        samples = stats.Sample().collect(stream, 2)

        self.assertEqual(samples.read_lengths, [90, 80])
        self.assertEqual(len(samples.insert_sizes), 2)

    def test_exhausted_stream(self):
        """
        Test buffers hold exactly min(N, qualifying records) when the
        stream ends or the insert buffer fills first
        """
        stream = [single()] * 4 + [pair()] * 2 + [single(flag=records.QC_FAIL)]

        for n in [1, 2, 3, 5, 10]:
            with self.subTest(n=n):
                samples = stats.Sample().collect(iter(stream), n)

                self.assertEqual(len(samples.insert_sizes), min(n, 2))
                self.assertEqual(len(samples.read_lengths), min(n, 6))
                self.assertEqual(len(samples.template_lengths), min(n, 2))

    def test_empty_stream(self):
        self.assertEqual(stats.Sample().collect([], 10), stats.SampleSet())

    def test_invalid_sample_size(self):
        for n in [0, -1]:
            with self.subTest(n=n):
                with self.assertRaises(ValueError):
                    stats.Sample().collect([], n)

    def test_read_error_propagates(self):
        """
        Test an error from the record source aborts sampling
        """
        def stream():
            yield single()
            raise AlignmentReadError("truncated file")

        with self.assertRaises(AlignmentReadError):
            stats.Sample().collect(stream(), 10)
