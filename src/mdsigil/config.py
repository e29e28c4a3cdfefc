"""ContextVar-based expansion configuration for mdsigil.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Config is set once per Expander call and read by the parser, resolver and
renderer running in that context.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    # High level
    expander = Expander(target="local", asset_dir="docs/assets")
    result = expander.expand(source)  # Sets config internally via ContextVar

    # Direct usage
    from mdsigil.config import ExpandConfig, expand_config_context

    with expand_config_context(ExpandConfig(preserve_code=False)):
        doc = parse(source, registry=registry)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ExpandConfig:
    """Immutable expansion configuration.

    Attributes:
        target: Target name ("github", "gitlab", "local", "npm", "pypi", "auto")
        backend: Backend override ("shields", "svg", "plaintext"); None uses
            the target's preferred backend
        asset_dir: Directory (relative to the output) for generated SVG files
        inline_svg: Embed SVG markup directly instead of writing asset files
        preserve_code: Leave tags inside fenced code blocks and code spans alone
        shield_style: Default shield style for components that omit ``style=``
        output_path: Output path, used when ``target`` is "auto"

    """

    target: str = "github"
    backend: str | None = None
    asset_dir: str = "assets/mdsigil"
    inline_svg: bool = False
    preserve_code: bool = True
    shield_style: str | None = None
    output_path: str | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ExpandConfig":
        """Create ExpandConfig from a dictionary.

        Only keys that are ExpandConfig fields are used; unknown keys are
        silently ignored, so a project-level config file can carry other
        settings alongside these.

        Example:
            >>> config = ExpandConfig.from_dict({"target": "pypi", "theme": "x"})
            >>> config.target
            'pypi'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


_DEFAULT_CONFIG: ExpandConfig = ExpandConfig()

_expand_config: ContextVar[ExpandConfig] = ContextVar(
    "expand_config",
    default=_DEFAULT_CONFIG,
)


def get_expand_config() -> ExpandConfig:
    """Get the active configuration for this thread/context."""
    return _expand_config.get()


def set_expand_config(config: ExpandConfig) -> None:
    """Set configuration for the current context.

    Thread Safety:
        Only affects the current thread's context.

    """
    _expand_config.set(config)


def reset_expand_config() -> None:
    """Reset to the module-level default configuration."""
    _expand_config.set(_DEFAULT_CONFIG)


@contextmanager
def expand_config_context(config: ExpandConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with expand_config_context(ExpandConfig(target="pypi")):
        ...     get_expand_config().target
        'pypi'

    """
    token = _expand_config.set(config)
    try:
        yield
    finally:
        _expand_config.reset(token)


__all__ = [
    "ExpandConfig",
    "expand_config_context",
    "get_expand_config",
    "reset_expand_config",
    "set_expand_config",
]
