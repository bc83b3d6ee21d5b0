"""Tests for the folded-stack wire format."""

import pytest

from profagent.runtime.folded import dump_folded, parse_folded
from profagent.types import Frame, Profile, ProfileKind, Sample


class TestParseFolded:
    def test_frames_are_innermost_first(self):
        profile = parse_folded(b"main.run:3;app.work:42 7\n")
        (sample,) = profile.samples
        assert sample.frames == (Frame("app.work", 42), Frame("main.run", 3))
        assert sample.values == (7,)

    def test_kind_from_header(self):
        profile = parse_folded("# kind: block\na:1 2 3000\n")
        assert profile.kind is ProfileKind.BLOCK
        assert profile.samples[0].values == (2, 3000)

    def test_explicit_kind_overrides_header(self):
        profile = parse_folded("# kind: block\na:1 2\n", kind=ProfileKind.HEAP)
        assert profile.kind is ProfileKind.HEAP

    def test_defaults_to_cpu(self):
        assert parse_folded(b"a:1 2\n").kind is ProfileKind.CPU

    def test_blank_lines_ignored(self):
        profile = parse_folded("\na:1 1\n\n   \nb:2 2\n")
        assert len(profile.samples) == 2

    def test_empty_input(self):
        profile = parse_folded(b"")
        assert profile.samples == ()

    def test_frame_without_line_is_unresolved(self):
        (sample,) = parse_folded("outer:1;<builtin> 5\n").samples
        assert sample.frames[0] == Frame("<builtin>", None)
        assert sample.frames[0].key == ""
        assert sample.frames[1].key == "outer:1"

    def test_unknown_function_marker(self):
        (sample,) = parse_folded("?:12 5\n").samples
        assert sample.frames[0].function is None
        assert sample.frames[0].key == ""

    def test_function_containing_spaces(self):
        (sample,) = parse_folded("/srv/my app/mod.py:3 7 8\n").samples
        assert sample.frames[0] == Frame("/srv/my app/mod.py", 3)
        assert sample.values == (7, 8)

    @pytest.mark.parametrize(
        "data",
        [
            b"a:1;b:2\n",
            b"a:1 1\nb:2 1 2\n",
            b"\xff\xfe a:1 1\n",
            b"# kind: nope\na:1 1\n",
        ],
    )
    def test_malformed_input(self, data):
        with pytest.raises(ValueError):
            parse_folded(data)


class TestDumpFolded:
    def test_round_trip(self):
        profile = Profile(
            kind=ProfileKind.ALLOCS,
            samples=(
                Sample(frames=(Frame("app.f", 9), Frame("app.main", 1)), values=(3, 4096)),
                Sample(frames=(Frame("app.g", 2),), values=(1, 64)),
            ),
        )
        data = dump_folded(profile)
        assert data.startswith(b"# kind: allocs\n")
        assert b"app.main:1;app.f:9 3 4096\n" in data
        assert parse_folded(data) == profile

    def test_unresolved_frames_stay_unresolved(self):
        profile = Profile(
            kind=ProfileKind.CPU,
            samples=(Sample(frames=(Frame(None, 12), Frame("app.main", None)), values=(1,)),),
        )
        (sample,) = parse_folded(dump_folded(profile)).samples
        assert [f.key for f in sample.frames] == ["", ""]

    def test_samples_without_frames_are_omitted(self):
        profile = Profile(kind=ProfileKind.CPU, samples=(Sample(frames=(), values=(5,)),))
        assert parse_folded(dump_folded(profile)).samples == ()
