"""Tests for view-state routing."""

import pytest

from testbed_report.router import (
    Back,
    SelectKernel,
    SelectMode,
    ViewMode,
    ViewState,
    decode_location,
    encode_kernel_name,
    encode_location,
    reduce,
)

KERNELS = ("python3", "ir", "xeus cling", "c++/17")


class TestLocations:
    """Tests for encoding and decoding locations."""

    @pytest.mark.parametrize(
        "state",
        [
            ViewState(mode="summary"),
            ViewState(mode="matrix"),
            ViewState(mode="cards"),
            ViewState(mode="summary", kernel="python3"),
            ViewState(mode="cards", kernel="xeus cling"),
            ViewState(mode="matrix", kernel="c++/17"),
        ],
    )
    def test_round_trip(self, state: ViewState) -> None:
        """Decodes an encoded state back to the same state."""
        assert decode_location(encode_location(state), KERNELS) == state

    @pytest.mark.parametrize("base_path", ["/kernel-testbed", "/kernel-testbed/"])
    def test_round_trip_with_base_path(self, base_path: str) -> None:
        """Strips the base path when decoding."""
        state = ViewState(mode="matrix", kernel="ir")

        location = encode_location(state, base_path)

        assert location == "/kernel-testbed/kernel/ir/?from=matrix"
        assert decode_location(location, KERNELS, base_path) == state

    def test_encodes_mode_paths(self) -> None:
        """Maps each mode to its path."""
        assert encode_location(ViewState(mode="summary")) == "/"
        assert encode_location(ViewState(mode="matrix")) == "/matrix/"
        assert encode_location(ViewState(mode="cards")) == "/cards/"

    def test_encodes_kernel_names(self) -> None:
        """Percent-encodes names as a single path segment."""
        assert encode_kernel_name("xeus cling") == "xeus%20cling"
        assert encode_kernel_name("c++/17") == "c%2B%2B%2F17"
        assert encode_kernel_name("it's(ok)") == "it's(ok)"

    @pytest.mark.parametrize(
        ("name", "encoded"), [(".", "%2E"), ("..", "%2E%2E"), ("...", "%2E%2E%2E")]
    )
    def test_escapes_dot_only_names(self, name: str, encoded: str) -> None:
        """Escapes names that would be relative path segments."""
        assert encode_kernel_name(name) == encoded
        assert encode_kernel_name("v1.0") == "v1.0"

    def test_round_trips_dot_only_names(self) -> None:
        """Decodes an escaped dot-only name back to the kernel."""
        state = ViewState(mode="cards", kernel="..")

        location = encode_location(state)

        assert location == "/kernel/%2E%2E/?from=cards"
        assert decode_location(location, ("..",)) == state

    def test_accepts_fragment(self) -> None:
        """Reads hash-style locations."""
        assert decode_location("#/cards/", KERNELS) == ViewState(mode="cards")

    @pytest.mark.parametrize(
        "location", ["/nowhere/", "/kernel/", "/kernel/a/b/", "", "#", "/matrix/extra/"]
    )
    def test_unknown_location_resolves_to_summary(self, location: str) -> None:
        """Falls back to the summary with no kernel selected."""
        assert decode_location(location, KERNELS) == ViewState()

    def test_unknown_kernel_keeps_mode(self) -> None:
        """Drops a kernel that is not in the document."""
        state = decode_location("/kernel/missing/?from=cards", KERNELS)

        assert state == ViewState(mode="cards")

    def test_unknown_origin_defaults_to_summary(self) -> None:
        """Ignores an unrecognized origin mode."""
        state = decode_location("/kernel/ir/?from=elsewhere", KERNELS)

        assert state == ViewState(mode="summary", kernel="ir")


class TestReduce:
    """Tests for state transitions."""

    def test_select_kernel_keeps_mode(self) -> None:
        """Opens the detail over the current mode."""
        state = reduce(ViewState(mode="matrix"), SelectKernel(name="ir"), KERNELS)

        assert state == ViewState(mode="matrix", kernel="ir")

    def test_select_unknown_kernel(self) -> None:
        """Leaves no kernel selected for an unknown name."""
        start = ViewState(mode="cards", kernel="ir")

        state = reduce(start, SelectKernel(name="missing"), KERNELS)

        assert state == ViewState(mode="cards")

    def test_select_mode_clears_kernel(self) -> None:
        """Switches mode and clears the selection."""
        start = ViewState(mode="summary", kernel="ir")

        state = reduce(start, SelectMode(mode="cards"), KERNELS)

        assert state == ViewState(mode="cards")

    @pytest.mark.parametrize("mode", ["summary", "matrix", "cards"])
    def test_back_returns_to_origin(self, mode: ViewMode) -> None:
        """Returns to the mode the detail was opened from."""
        start = ViewState(mode=mode)
        opened = reduce(start, SelectKernel(name="python3"), KERNELS)

        assert reduce(opened, Back(), KERNELS) == start

    def test_navigation_survives_location_round_trip(self) -> None:
        """Goes back to the origin mode after reloading a detail location."""
        opened = reduce(ViewState(mode="cards"), SelectKernel(name="ir"), KERNELS)
        reloaded = decode_location(encode_location(opened), KERNELS)

        assert reduce(reloaded, Back(), KERNELS) == ViewState(mode="cards")
