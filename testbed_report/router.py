"""View-state routing between the summary, matrix, cards and kernel detail views.

The location string is the only source of truth: ``encode_location`` and
``decode_location`` round-trip every state, and ``reduce`` computes the next
state without side effects. Navigation never reloads the document.
"""

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal
from urllib.parse import parse_qs, quote, unquote, urlsplit

type ViewMode = Literal["summary", "matrix", "cards"]

VIEW_MODES: Sequence[ViewMode] = ("summary", "matrix", "cards")

MODE_PATHS: Mapping[ViewMode, str] = {
    "summary": "/",
    "matrix": "/matrix/",
    "cards": "/cards/",
}

KERNEL_SEGMENT = "kernel"
ORIGIN_PARAM = "from"

# Characters encodeURIComponent leaves unescaped besides alphanumerics.
URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True, kw_only=True)
class ViewState:
    """Current list mode plus an optional kernel shown on top of it."""

    mode: ViewMode = "summary"
    kernel: str | None = None


@dataclass(frozen=True, kw_only=True)
class SelectKernel:
    """Open the detail view of a kernel."""

    name: str


@dataclass(frozen=True, kw_only=True)
class SelectMode:
    """Switch to a list mode."""

    mode: ViewMode


@dataclass(frozen=True, kw_only=True)
class Back:
    """Leave the kernel detail view."""


type Action = SelectKernel | SelectMode | Back


def reduce(state: ViewState, action: Action, kernel_names: Collection[str]) -> ViewState:
    """Compute the state that follows an action.

    Selecting a kernel keeps the list mode it was opened from, so going back
    returns there. Selecting an unknown kernel leaves no kernel selected.
    """
    if isinstance(action, SelectKernel):
        if action.name not in kernel_names:
            return ViewState(mode=state.mode)
        return ViewState(mode=state.mode, kernel=action.name)

    if isinstance(action, SelectMode):
        return ViewState(mode=action.mode)

    return ViewState(mode=state.mode)


def encode_kernel_name(kernel_name: str) -> str:
    """Percent-encode a kernel name for use as a single path segment.

    Dot-only names are relative path segments, so their dots are escaped too.
    """
    if kernel_name and not kernel_name.strip("."):
        return kernel_name.replace(".", "%2E")
    return quote(kernel_name, safe=URI_COMPONENT_SAFE)


def encode_location(state: ViewState, base_path: str = "") -> str:
    """Encode a state as a location path."""
    prefix = base_path.rstrip("/")
    if state.kernel is None:
        return prefix + MODE_PATHS[state.mode]

    location = f"{prefix}/{KERNEL_SEGMENT}/{encode_kernel_name(state.kernel)}/"
    if state.mode != "summary":
        location += f"?{ORIGIN_PARAM}={state.mode}"
    return location


def decode_location(
    location: str, kernel_names: Collection[str], base_path: str = ""
) -> ViewState:
    """Decode a location path or fragment into a state.

    Unrecognized locations resolve to the summary mode, and a kernel that is
    not in ``kernel_names`` resolves to no selection.
    """
    parts = urlsplit(location.removeprefix("#"))
    path = parts.path
    prefix = base_path.rstrip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix) :]

    segments = [segment for segment in path.split("/") if segment]

    if not segments:
        return ViewState()

    if len(segments) == 1:
        for mode in VIEW_MODES:
            if MODE_PATHS[mode] == f"/{segments[0]}/":
                return ViewState(mode=mode)
        return ViewState()

    if len(segments) == 2 and segments[0] == KERNEL_SEGMENT:
        origin = parse_qs(parts.query).get(ORIGIN_PARAM, ["summary"])[0]
        mode: ViewMode = "summary"
        for candidate in VIEW_MODES:
            if candidate == origin:
                mode = candidate
        name = unquote(segments[1])
        if name in kernel_names:
            return ViewState(mode=mode, kernel=name)
        return ViewState(mode=mode)

    return ViewState()
