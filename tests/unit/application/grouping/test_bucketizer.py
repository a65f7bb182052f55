"""Tests for application/grouping/bucketizer.py."""

import logging

import pytest

from stackfold.application.grouping.bucketizer import aggregate, equal, less, similar
from stackfold.domain.model.arg import Arg, Args
from stackfold.domain.model.enums import SimilarityPolicy
from stackfold.domain.model.goroutine import Goroutine
from stackfold.domain.model.signature import Signature
from tests.factories import make_args, make_call, make_goroutine, make_signature

POINTER_A = 0xC000010000
POINTER_B = 0xC000020000


def worker(*args: int, state: str = "chan receive", **kwargs: object) -> Signature:
    """Two-frame signature whose leaf takes args."""
    return make_signature(
        state,
        (make_call("main.main", line=5), make_call("main.worker", args=make_args(*args), line=12)),
        **kwargs,
    )


class TestDelegates:
    """Tests for equal(), similar() and less()."""

    def test_equal(self) -> None:
        assert equal(worker(1), worker(1))
        assert not equal(worker(1), worker(2))

    def test_similar(self) -> None:
        assert similar(worker(POINTER_A), worker(POINTER_B), SimilarityPolicy.EXACT_FLAGS)
        assert not similar(worker(1), worker(2), SimilarityPolicy.EXACT_FLAGS)
        assert similar(worker(1), worker(2), SimilarityPolicy.EXACT_LINES)

    def test_less(self) -> None:
        short = make_signature()
        assert less(short, worker(1))
        assert not less(worker(1), short)
        assert not less(short, short)


class TestAggregate:
    """Tests for aggregate()."""

    def test_empty(self) -> None:
        assert aggregate([], SimilarityPolicy.ANY_VALUE) == ()

    def test_identical_goroutines_collapse(self) -> None:
        goroutines = [make_goroutine(i, worker(1)) for i in (3, 4, 5)]

        groups = aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)

        assert len(groups) == 1
        assert groups[0].count == 3
        assert groups[0].ids == (3, 4, 5)
        assert groups[0].id == 3

    def test_pointer_args_collapse_under_every_policy(self) -> None:
        goroutines = [make_goroutine(1, worker(POINTER_A)), make_goroutine(2, worker(POINTER_B))]

        for policy in SimilarityPolicy:
            assert len(aggregate(goroutines, policy)) == 1

    def test_small_values_only_differ_under_exact_flags(self) -> None:
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, worker(2))]

        assert len(aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)) == 2
        assert len(aggregate(goroutines, SimilarityPolicy.EXACT_LINES)) == 1
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_VALUE)) == 1

    def test_arg_count_always_compared(self) -> None:
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, worker(1, 2))]
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_VALUE)) == 2

    def test_differing_args_merged_to_star(self) -> None:
        goroutines = [make_goroutine(1, worker(POINTER_A, 1)), make_goroutine(2, worker(POINTER_B, 1))]

        group = aggregate(goroutines, SimilarityPolicy.ANY_POINTER)[0]

        assert group.signature.stack.leaf.args == Args(values=(Arg(name="*"), Arg(value=1)))
        assert str(group.signature.stack.leaf.args) == "*, 1"

    def test_identical_args_kept(self) -> None:
        goroutines = [make_goroutine(1, worker(POINTER_A)), make_goroutine(2, worker(POINTER_A))]

        group = aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)[0]

        assert group.signature.stack.leaf.args == make_args(POINTER_A)

    def test_merge_keeps_count_and_elision(self) -> None:
        wide = tuple(range(1, 11))
        goroutines = [
            make_goroutine(1, make_signature(calls=(make_call(args=make_args(*wide, elided=True)),))),
            make_goroutine(2, make_signature(calls=(make_call(args=make_args(*wide[::-1], elided=True)),))),
        ]

        group = aggregate(goroutines, SimilarityPolicy.ANY_VALUE)[0]

        args = group.signature.stack.calls[0].args
        assert len(args) == 10
        assert args.elided
        assert all(arg == Arg(name="*") for arg in args.values)

    def test_merge_every_frame(self) -> None:
        def pair(value: int) -> Signature:
            calls = (
                make_call("main.main", args=make_args(value), line=5),
                make_call("main.worker", args=make_args(value)),
            )
            return make_signature("select", calls)

        group = aggregate([make_goroutine(1, pair(1)), make_goroutine(2, pair(2))], SimilarityPolicy.ANY_VALUE)[0]

        assert [str(c.args) for c in group.signature.stack.calls] == ["*", "*"]

    def test_merged_group_absorbs_third(self) -> None:
        goroutines = [make_goroutine(i, worker(value, 7)) for i, value in enumerate((1, 2, 2), start=1)]

        group = aggregate(goroutines, SimilarityPolicy.ANY_VALUE)[0]

        assert group.count == 3
        assert str(group.signature.stack.leaf.args) == "*, 7"

    def test_merged_pointers_still_match_under_exact_flags(self) -> None:
        pointers = (POINTER_A, POINTER_B, POINTER_A + 0x100)
        goroutines = [make_goroutine(i, worker(p)) for i, p in enumerate(pointers, start=1)]

        groups = aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)

        assert len(groups) == 1
        assert groups[0].count == 3
        assert str(groups[0].signature.stack.leaf.args) == "*"

    def test_creator_args_not_merged(self) -> None:
        goroutines = [
            make_goroutine(1, worker(1, created_by=(make_call("main.main", args=make_args(1)),))),
            make_goroutine(2, worker(1, created_by=(make_call("main.main", args=make_args(2)),))),
        ]

        group = aggregate(goroutines, SimilarityPolicy.ANY_VALUE)[0]

        assert group.signature.created_by.calls[0].args == make_args(1)

    def test_different_state_not_grouped(self) -> None:
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, worker(1, state="select"))]
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_VALUE)) == 2

    def test_different_line_not_grouped(self) -> None:
        other = make_signature(
            "chan receive",
            (make_call("main.main", line=6), make_call("main.worker", args=make_args(1), line=12)),
        )
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, other)]
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_VALUE)) == 2

    def test_first_flag_propagates(self) -> None:
        goroutines = [make_goroutine(7, worker(1)), make_goroutine(1, worker(1), first=True)]

        group = aggregate(goroutines, SimilarityPolicy.EXACT_LINES)[0]

        assert group.first
        assert group.id == 7

    def test_sleep_range_widened(self) -> None:
        goroutines = [
            make_goroutine(1, worker(1, sleep_min=5)),
            make_goroutine(2, worker(1, sleep_min=10)),
        ]

        groups = aggregate(goroutines, SimilarityPolicy.ANY_VALUE)

        assert len(groups) == 1
        assert groups[0].signature.sleep_string == "5~10 minutes"

    def test_sleep_exact_under_other_policies(self) -> None:
        goroutines = [
            make_goroutine(1, worker(1, sleep_min=5)),
            make_goroutine(2, worker(1, sleep_min=10)),
        ]
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_POINTER)) == 2

    def test_locked_merged_unless_exact_flags(self) -> None:
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, worker(1, locked=True))]

        assert len(aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)) == 2
        groups = aggregate(goroutines, SimilarityPolicy.EXACT_LINES)
        assert len(groups) == 1
        assert groups[0].signature.locked_to_thread

    def test_created_by_one_side_only(self) -> None:
        creator = (make_call("main.main", line=4),)
        goroutines = [make_goroutine(1, worker(1)), make_goroutine(2, worker(1, created_by=creator))]
        assert len(aggregate(goroutines, SimilarityPolicy.ANY_VALUE)) == 2

    def test_first_match_wins(self) -> None:
        goroutines = [
            make_goroutine(1, worker(POINTER_A)),
            make_goroutine(2, worker(1)),
            make_goroutine(3, worker(POINTER_B)),
        ]

        groups = aggregate(goroutines, SimilarityPolicy.EXACT_FLAGS)

        assert sorted(g.all_ids for g in groups) == [(1, 3), (2,)]

    def test_sorted_for_presentation(self) -> None:
        deep = make_signature("running", (make_call("main.a"), make_call("main.b"), make_call("main.c")))
        goroutines = [
            make_goroutine(1, deep),
            make_goroutine(2, worker(1)),
            make_goroutine(3, make_signature("select")),
            make_goroutine(4, make_signature("IO wait")),
        ]

        groups = aggregate(goroutines, SimilarityPolicy.EXACT_LINES)

        assert [g.id for g in groups] == [4, 3, 2, 1]
        assert all(not less(b.signature, a.signature) for a, b in zip(groups, groups[1:]))

    def test_count_preserved(self) -> None:
        goroutines = [make_goroutine(i, worker(i % 3 * POINTER_A)) for i in range(1, 20)]

        groups = aggregate(goroutines, SimilarityPolicy.ANY_POINTER)

        assert sum(g.count for g in groups) == len(goroutines)
        assert sorted(i for g in groups for i in g.all_ids) == list(range(1, 20))

    def test_preaggregated_input(self) -> None:
        goroutines = [
            Goroutine(id=1, signature=worker(1), count=3),
            Goroutine(id=5, signature=worker(1), count=2, ids=(5, 6)),
        ]

        groups = aggregate(goroutines, SimilarityPolicy.EXACT_LINES)

        assert groups[0].count == 5
        assert groups[0].ids == ()

    def test_input_not_modified(self) -> None:
        goroutines = (make_goroutine(1, worker(1, sleep_min=1)), make_goroutine(2, worker(2, sleep_min=3)))
        before = tuple(goroutines)

        aggregate(goroutines, SimilarityPolicy.ANY_VALUE)

        assert goroutines == before

    def test_accepts_generator(self) -> None:
        groups = aggregate((make_goroutine(i) for i in range(3)), SimilarityPolicy.EXACT_LINES)
        assert groups[0].count == 3

    def test_logs_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="stackfold.application.grouping.bucketizer"):
            aggregate([make_goroutine(1), make_goroutine(2)], SimilarityPolicy.EXACT_LINES)
        assert "Aggregated 2 goroutines into 1 groups (policy EXACT_LINES)" in caplog.text
