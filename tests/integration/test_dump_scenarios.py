"""End-to-end tests: dump text through parsing, resolution and grouping."""

from itertools import permutations, product

import pytest

from stackfold import StackAnalyzer
from stackfold.application.grouping import aggregate, equal, less, similar
from stackfold.application.services import parse_dump, scan_dump
from stackfold.domain.model.configuration import RootConfig
from stackfold.domain.model.enums import Location, SimilarityPolicy
from stackfold.infrastructure.analyzers.path_resolver import resolve
from stackfold.infrastructure.analyzers.symbol_parser import parse_symbol
from tests.factories import block, make_args, make_call, make_func, make_signature

POINTER_A = 0xC000010000
POINTER_B = 0xC000020000

SAMPLES = (
    make_signature(),
    make_signature("select"),
    make_signature("chan receive", (make_call("main.main"), make_call("main.worker", args=make_args(1)))),
    make_signature("chan receive", (make_call("main.main"), make_call("main.worker", args=make_args(2)))),
    make_signature("chan receive", (make_call("main.main"), make_call("main.worker", args=make_args(POINTER_A)))),
    make_signature("chan receive", (make_call("main.main"), make_call("main.worker", args=make_args(POINTER_B)))),
    make_signature("chan receive", sleep_min=5, sleep_max=10),
    make_signature("chan receive", sleep_min=1),
    make_signature("chan receive", locked=True),
    make_signature("running", created_by=(make_call("main.init", line=3),)),
)


class TestScenarios:
    """Dumps as printed by the runtime."""

    def test_pointer_argument_differs(self) -> None:
        dump = block(
            1,
            "chan receive",
            (f"main.worker({POINTER_A:#x})", "/home/user/src/app/main.go:12 +0x2b"),
            ("main.main()", "/home/user/src/app/main.go:5 +0x25"),
        ) + block(
            2,
            "chan receive",
            (f"main.worker({POINTER_B:#x})", "/home/user/src/app/main.go:12 +0x2b"),
            ("main.main()", "/home/user/src/app/main.go:5 +0x25"),
        )
        goroutines = parse_dump(dump)

        for policy in (SimilarityPolicy.EXACT_FLAGS, SimilarityPolicy.ANY_VALUE):
            groups = aggregate(goroutines, policy)
            assert len(groups) == 1
            assert groups[0].count == 2

    def test_shared_mutex_labeled_through_grouping(self) -> None:
        lock = ("sync.(*Mutex).Lock(0xc0000b4000)", "/usr/local/go/src/sync/mutex.go:90 +0x2f")
        dump = (
            block(1, "running", ("main.owner(0xc0000b4000)", "/home/user/src/app/main.go:20"))
            + block(2, "sync.Mutex.Lock", lock, (f"main.waiter({POINTER_A:#x})", "/home/user/src/app/main.go:30"))
            + block(3, "sync.Mutex.Lock", lock, (f"main.waiter({POINTER_B:#x})", "/home/user/src/app/main.go:30"))
        )

        groups = StackAnalyzer(policy=SimilarityPolicy.ANY_POINTER).analyze(dump).groups

        waiters = next(g for g in groups if g.count == 2)
        assert [str(c.args) for c in waiters.signature.stack.calls] == ["*", "#1"]
        owner = next(g for g in groups if g.first)
        assert str(owner.signature.stack.leaf.args) == "#1"

    def test_anonymous_closure(self) -> None:
        dump = block(1, "running", ("main.func·001()", "/home/user/src/app/main.go:9"))

        func = parse_dump(dump)[0].signature.stack.calls[0].func

        assert func.is_pkg_main
        assert func.name == "func·001"
        assert func == parse_symbol("main.func·001")

    def test_sleep_range(self) -> None:
        dump = block(5, "chan receive, 5~10 minutes", ("main.worker()", "/home/user/src/app/main.go:12"))

        signature = parse_dump(dump)[0].signature

        assert signature.sleep_min == 5
        assert signature.sleep_max == 10

    def test_module_cache_version(self) -> None:
        src = "/home/ci/go/pkg/mod/github.com/acme/lib@v2.3.0/client.go"
        dump = block(1, "IO wait", ("github.com/acme/lib.(*Client).Do()", f"{src}:40"))
        config = RootConfig(module_cache_roots={"/home/ci/go/pkg/mod": "/home/me/go/pkg/mod"})

        call = parse_dump(dump, config)[0].signature.stack.calls[0]
        resolved = resolve(call.func, call.remote_src_path, config)

        assert call.location is Location.GO_PKG
        assert call.import_path == "github.com/acme/lib@v2.3.0"
        assert resolved.dir_name == "lib"
        assert call.local_src_path == "/home/me/go/pkg/mod/github.com/acme/lib@v2.3.0/client.go"

    def test_elided_arguments(self) -> None:
        args = ", ".join(f"{i:#x}" for i in range(1, 11))
        dump = block(1, "running", (f"main.wide({args}, ...)", "/home/user/src/app/main.go:3"))

        call = parse_dump(dump)[0].signature.stack.calls[0]

        assert call.args.elided
        assert len(call.args.values) == 10

    def test_struct_arguments_cut_short(self) -> None:
        words = ", ".join(f"{i:#x}" for i in range(1, 11))
        dump = block(1, "running", (f"main.wide({{{words}, ...}})", "/home/user/src/app/main.go:3"))

        call = parse_dump(dump)[0].signature.stack.calls[0]

        assert call.args.elided
        assert len(call.args) == 10
        assert not any(arg.is_name for arg in call.args.values)

    def test_lone_struct_placeholder(self) -> None:
        dump = block(1, "running", ("main.wide({...}, 0x1)", "/home/user/src/app/main.go:3"))

        call = parse_dump(dump)[0].signature.stack.calls[0]

        assert not call.args.elided
        assert str(call.args) == "..., 1"

    def test_panic_output(self) -> None:
        dump = (
            "panic: runtime error: invalid memory address or nil pointer dereference\n"
            "[signal SIGSEGV: segmentation violation code=0x1 addr=0x0 pc=0x47f2a1]\n\n"
            + block(
                1,
                "running",
                ("main.(*Server).handle(0x0, {0xc000012345, 0x5})", "/home/user/src/app/server.go:44 +0x21"),
                ("main.main()", "/home/user/src/app/main.go:12 +0x3f"),
            )
            + block(
                18,
                "IO wait, 3 minutes",
                ("internal/poll.runtime_pollWait(0x7f9a2c5e0f08, 0x72)", "/usr/local/go/src/runtime/netpoll.go:343 +0x85"),
                ("net.(*netFD).Read(0xc0000a6000, {0xc0000c4000, 0x1000, 0x1000})", "/usr/local/go/src/net/fd_posix.go:55 +0x25"),
                created_by=("net/http.(*Server).Serve in goroutine 1", "/usr/local/go/src/net/http/server.go:3086 +0x5cb"),
            )
            + "exit status 2\n"
        )
        config = RootConfig(goroot_remote="/usr/local/go", go_mod_roots={"/home/user/src/app": "example.com/app"})

        result = StackAnalyzer(config, SimilarityPolicy.ANY_POINTER).analyze(dump)

        assert result.goroutine_count == 2
        assert result.scan.prefix.startswith("panic: runtime error")
        assert result.scan.suffix == "exit status 2\n"
        crasher = next(g for g in result.groups if g.first)
        assert crasher.signature.stack.leaf.func.name == "(*Server).handle"
        assert crasher.signature.stack.leaf.location is Location.GO_MOD
        reader = next(g for g in result.groups if not g.first)
        assert all(c.is_stdlib for c in reader.signature.stack.calls)
        assert reader.signature.created_by.calls[0].import_path == "net/http"
        assert reader.created_by_id == 1

    def test_interleaved_log_output(self) -> None:
        dump = block(1, "running", ("main.main()", "/app/main.go:3")).replace(
            "main.main()\n", "main.main()\n2024/05/01 12:00:00 request served\n"
        )

        scan = scan_dump(dump)

        assert scan.goroutines[0].signature.stack.names() == ("main.main",)
        assert [u.text for u in scan.unclassified] == ["2024/05/01 12:00:00 request served"]


class TestProperties:
    """Properties that hold for every input."""

    @pytest.mark.parametrize("policy", list(SimilarityPolicy))
    def test_equal_implies_similar(self, policy: SimilarityPolicy) -> None:
        for a, b in product(SAMPLES, repeat=2):
            if equal(a, b):
                assert similar(a, b, policy)

    @pytest.mark.parametrize("policy", list(SimilarityPolicy))
    def test_similar_reflexive_and_symmetric(self, policy: SimilarityPolicy) -> None:
        # Transitivity is not asserted: tolerance does not form equivalence classes.
        for a in SAMPLES:
            assert similar(a, a, policy)
        for a, b in product(SAMPLES, repeat=2):
            assert similar(a, b, policy) == similar(b, a, policy)

    @pytest.mark.parametrize("policy", list(SimilarityPolicy))
    def test_aggregate_preserves_count(self, policy: SimilarityPolicy) -> None:
        goroutines = parse_dump(
            "".join(block(i, "running", (f"main.f({i:#x})", "/app/f.go:1")) for i in range(1, 30))
        )
        assert sum(g.count for g in aggregate(goroutines, policy)) == len(goroutines)

    def test_sort_idempotent(self) -> None:
        once = sorted(SAMPLES, key=lambda s: s.sort_key())
        assert sorted(once, key=lambda s: s.sort_key()) == once

    def test_less_transitive(self) -> None:
        for a, b, c in permutations(SAMPLES, 3):
            if less(a, b) and less(b, c):
                assert less(a, c)

    def test_less_total(self) -> None:
        for a, b in permutations(SAMPLES, 2):
            assert less(a, b) != less(b, a)

    def test_resolve_deterministic(self) -> None:
        config = RootConfig(goroot_remote="/usr/local/go", go_mod_roots={"/src/app": "example.com/app"})
        func = make_func("example.com/app/vendor/github.com/x/y.Run")
        path = "/src/app/vendor/github.com/x/y/run.go"

        assert resolve(func, path, config) == resolve(func, path, config)

    @pytest.mark.parametrize("raw", ["foo", "runtime_main", "x", "_cgo_panic"])
    def test_symbol_without_dot(self, raw: str) -> None:
        func = parse_symbol(raw)
        assert func.name == raw
        assert func.import_path == ""
