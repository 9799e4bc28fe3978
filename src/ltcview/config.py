"""Configuration for ltcview: refresh settings, target settings and durations."""

import re
import threading
from dataclasses import dataclass

import click
import httpx

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# Longest wait Event.wait accepts
MAX_DURATION = threading.TIMEOUT_MAX


def _bounded(seconds: float, value: object) -> float:
    if seconds > MAX_DURATION:
        raise ValueError(f"duration too long: {value!r}")
    return seconds


def parse_duration(value: str) -> float:
    """
    Parse a duration into seconds.

    Accepts Go-style durations such as ``500ms``, ``2s`` or ``1m30s``.
    A bare number is taken as seconds.

    Raises:
        ValueError: If the value is malformed, negative or longer than
            MAX_DURATION.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    if text.startswith("-"):
        raise ValueError(f"duration must not be negative: {value!r}")
    text = text.lstrip("+")

    if _BARE_NUMBER.fullmatch(text):
        return _bounded(float(text), value)

    seconds = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    return _bounded(seconds, value)


class DurationParamType(click.ParamType):
    """Click parameter type for durations, converted to seconds."""

    name = "duration"

    def convert(
        self,
        value: object,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> float:
        if isinstance(value, (int, float)):
            if value < 0:
                self.fail(f"duration must not be negative: {value!r}", param, ctx)
            if value > MAX_DURATION:
                self.fail(f"duration too long: {value!r}", param, ctx)
            return float(value)
        try:
            return parse_duration(str(value))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


DURATION = DurationParamType()


@dataclass(slots=True, frozen=True)
class RefreshConfig:
    """Refresh settings for the live visualization."""

    interval: float = 0.0  # Seconds between frames, 0 renders once

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError(f"refresh interval must not be negative: {self.interval}")
        if self.interval > MAX_DURATION:
            raise ValueError(f"refresh interval too long: {self.interval}")

    @property
    def is_live(self) -> bool:
        """Check if the visualization keeps refreshing."""
        return self.interval > 0


@dataclass(slots=True, frozen=True)
class Settings:
    """Connection settings for the receptor API."""

    target: str = ""
    username: str = ""
    password: str = ""
    timeout: float = 10.0

    @property
    def receptor_url(self) -> str:
        """
        Get the receptor base URL.

        A bare system domain maps to ``http://receptor.<domain>``; a value
        with a scheme is used as is.
        """
        target = self.target.strip().rstrip("/")
        if not target:
            raise ValueError("no target set")
        if "://" in target:
            return target
        return f"http://receptor.{target}"

    @property
    def auth(self) -> httpx.BasicAuth | None:
        """Get basic auth credentials, if a username is set."""
        if not self.username:
            return None
        return httpx.BasicAuth(self.username, self.password)
