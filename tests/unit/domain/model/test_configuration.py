"""Tests for domain/model/configuration.py."""

import pytest

from stackfold.domain.model.configuration import (
    DEFAULT_MAX_INLINE_ARGS,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_MAX_STACK_DEPTH,
    ParseOptions,
    RootConfig,
)


class TestRootConfig:
    """Tests for RootConfig."""

    def test_empty_is_valid(self) -> None:
        config = RootConfig()
        assert not config.has_roots()
        assert config.all_module_cache_roots() == ()

    def test_any_root_counts(self) -> None:
        assert RootConfig(goroot_remote="/usr/local/go").has_roots()
        assert RootConfig(gopath_pairs=(("/go", "/go"),)).has_roots()
        assert RootConfig(module_cache_roots={"/mod": "/mod"}).has_roots()

    def test_local_goroot_defaults_to_remote(self) -> None:
        assert RootConfig(goroot_remote="/usr/local/go").local_goroot == "/usr/local/go"

    def test_local_goroot_override(self) -> None:
        config = RootConfig(goroot_remote="/usr/local/go", goroot_local="/opt/go")
        assert config.local_goroot == "/opt/go"

    def test_goroot_local_requires_remote(self) -> None:
        with pytest.raises(ValueError, match="goroot_local requires goroot_remote"):
            RootConfig(goroot_local="/opt/go")

    def test_trailing_separator_raises(self) -> None:
        with pytest.raises(ValueError, match="path separator"):
            RootConfig(goroot_remote="/usr/local/go/")

    def test_trailing_backslash_raises(self) -> None:
        with pytest.raises(ValueError, match="path separator"):
            RootConfig(gopath_pairs=(("C:\\go\\", "/go"),))

    def test_empty_module_path_raises(self) -> None:
        with pytest.raises(ValueError, match="module path"):
            RootConfig(go_mod_roots={"/src/app": ""})

    def test_mappings_are_read_only(self) -> None:
        config = RootConfig(go_mod_roots={"/src/app": "example.com/app"})
        with pytest.raises(TypeError):
            config.go_mod_roots["/other"] = "x"  # type: ignore[index]

    def test_gopath_adds_implicit_module_cache(self) -> None:
        config = RootConfig(
            gopath_pairs=(("/home/ci/go", "/home/me/go"),),
            module_cache_roots={"/cache": "/local/cache"},
        )
        assert config.all_module_cache_roots() == (
            ("/cache", "/local/cache"),
            ("/home/ci/go/pkg/mod", "/home/me/go/pkg/mod"),
        )

    def test_go_mod_roots_longest_first(self) -> None:
        config = RootConfig(go_mod_roots={"/src/app": "example.com/app", "/src/app/sub": "example.com/sub"})
        assert [root for root, _ in config.sorted_go_mod_roots()] == ["/src/app/sub", "/src/app"]


class TestParseOptions:
    """Tests for ParseOptions."""

    def test_defaults(self) -> None:
        options = ParseOptions()
        assert options.max_inline_args == DEFAULT_MAX_INLINE_ARGS == 10
        assert options.max_line_length == DEFAULT_MAX_LINE_LENGTH == 65536
        assert options.max_stack_depth == DEFAULT_MAX_STACK_DEPTH

    @pytest.mark.parametrize("field", ["max_inline_args", "max_line_length", "max_stack_depth"])
    def test_zero_raises(self, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            ParseOptions(**{field: 0})
