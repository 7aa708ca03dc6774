"""Tracer configuration: trace flags, shading model switches and limits.

The configuration is a plain Python dataclass. Everything a kernel needs
from it is lowered to integers (see TracerConfig.kernel_args) so toggling a
flag between renders never forces a Taichi kernel recompile.

Example:
    >>> from tinyray.core.config import TraceFlags, TracerConfig
    >>> config = TracerConfig(trace_flags=TraceFlags.AMBIENT | TraceFlags.SHADOW)
    >>> TraceFlags.SHADOW in config.trace_flags
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Any

# Default recursion budget for primary rays
DEFAULT_MAX_DEPTH = 5


class ConfigurationError(ValueError):
    """Raised when the tracer, camera or framebuffer is misconfigured.

    Always raised before any pixel is traced, never mid-render.
    """


class TraceFlags(IntFlag):
    """Independently togglable lighting features of the tracer."""

    NONE = 0
    AMBIENT = 0x1
    DIFFUSE_AND_SPEC = 0x1 << 1
    SHADOW = 0x1 << 2
    REFLECTION = 0x1 << 3
    # Accepted for compatibility; refraction is never traced
    REFRACTION = 0x1 << 4


DEFAULT_TRACE_FLAGS = (
    TraceFlags.AMBIENT | TraceFlags.DIFFUSE_AND_SPEC | TraceFlags.SHADOW | TraceFlags.REFLECTION
)

ALL_TRACE_FLAGS = DEFAULT_TRACE_FLAGS | TraceFlags.REFRACTION


class SpecularModel(IntEnum):
    """Formula used for the specular highlight.

    LEGACY reflects the light *position* vector about the surface normal
    and compares it with the normal, reproducing the reference renderer's
    images. PHONG is the conventional reflect(-L, N) . V formulation.
    """

    LEGACY = 0
    PHONG = 1


class ReflectionModel(IntEnum):
    """Direction used for reflection rays.

    LEGACY offsets the mirrored view direction by the camera position,
    scaled by an empirical intensity factor derived from the camera. MIRROR
    is the ideal mirror direction reflect(d, n).
    """

    LEGACY = 0
    MIRROR = 1


def parse_trace_flags(value: Any) -> TraceFlags:
    """Convert an int mask, a flag name or a list of flag names to TraceFlags.

    Args:
        value: A TraceFlags value, an integer bitmask, a flag name such as
            "SHADOW" (case-insensitive), or an iterable of such names.

    Returns:
        The combined TraceFlags.

    Raises:
        ConfigurationError: If the value contains unknown flag names or bits.
    """
    if isinstance(value, TraceFlags):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid trace flags: {value!r}")
    if isinstance(value, int):
        if value < 0 or value & ~int(ALL_TRACE_FLAGS):
            raise ConfigurationError(f"Trace flag mask {value:#x} has unknown bits")
        return TraceFlags(value)
    if isinstance(value, str):
        value = [value]

    flags = TraceFlags.NONE
    try:
        names = list(value)
    except TypeError:
        raise ConfigurationError(f"Invalid trace flags: {value!r}") from None
    for name in names:
        try:
            flags |= TraceFlags[str(name).upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown trace flag: {name!r}") from None
    return flags


def _parse_enum(enum_cls: type[IntEnum], value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        if isinstance(value, str):
            return enum_cls[value.upper()]
        return enum_cls(value)
    except (KeyError, ValueError):
        raise ConfigurationError(f"Unknown {label}: {value!r}") from None


@dataclass
class TracerConfig:
    """Configuration surface of the ray tracer.

    Attributes:
        trace_flags: Enabled lighting features (default ambient, diffuse and
            specular, shadows and reflections).
        max_depth: Recursion budget handed to primary rays. Zero is allowed
            and makes every primary ray return the background colour.
        specular_model: Specular highlight formula.
        reflection_model: Reflection ray direction formula.
        apply_attenuation: Whether the inverse-square light attenuation is
            multiplied into diffuse and specular terms. Off by default.
        width: Expected framebuffer width in pixels, or None for any.
        height: Expected framebuffer height in pixels, or None for any.
    """

    trace_flags: TraceFlags = DEFAULT_TRACE_FLAGS
    max_depth: int = DEFAULT_MAX_DEPTH
    specular_model: SpecularModel = SpecularModel.LEGACY
    reflection_model: ReflectionModel = ReflectionModel.LEGACY
    apply_attenuation: bool = False
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        self.trace_flags = parse_trace_flags(self.trace_flags)
        self.specular_model = _parse_enum(SpecularModel, self.specular_model, "specular model")
        self.reflection_model = _parse_enum(
            ReflectionModel, self.reflection_model, "reflection model"
        )
        self.validate()

    def validate(self) -> None:
        """Check the configuration values.

        Raises:
            ConfigurationError: If max_depth is not a non-negative integer or
                a resolution is given but not positive.
        """
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigurationError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be >= 0, got {self.max_depth}")
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or value <= 0):
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    def has(self, flag: TraceFlags) -> bool:
        """Return True if every bit of flag is enabled."""
        return (self.trace_flags & flag) == flag

    def kernel_args(self) -> tuple[int, int, int, int]:
        """Lower the switches to kernel-friendly integers.

        Returns:
            Tuple of (flags, specular_model, reflection_model, apply_attenuation).
        """
        return (
            int(self.trace_flags),
            int(self.specular_model),
            int(self.reflection_model),
            int(self.apply_attenuation),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "trace_flags": [flag.name for flag in TraceFlags if flag and flag in self.trace_flags],
            "max_depth": self.max_depth,
            "specular_model": self.specular_model.name,
            "reflection_model": self.reflection_model.name,
            "apply_attenuation": self.apply_attenuation,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TracerConfig:
        """Create a configuration from a dictionary.

        Missing keys take their defaults; unknown keys are rejected.

        Raises:
            ConfigurationError: If a key or value is invalid.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown tracer config keys: {sorted(unknown)}")
        return cls(**data)
