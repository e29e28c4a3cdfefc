"""mdsigil renderers.

Renderers turn resolved primitives into markdown replacement text.

Available Backends:
- ShieldsBackend: shields.io image references (pure, no I/O)
- SvgBackend: locally generated SVG files named by content hash
- PlainTextBackend: bracketed ASCII text, also the fallback

Thread Safety:
Backends hold only configuration; Renderer keeps per-call state local to
each render() call. Safe for concurrent use from multiple threads.

"""

from mdsigil.renderers.plaintext import PlainTextBackend
from mdsigil.renderers.protocol import Artifact, Backend, Fragment, RenderedOutput, Replacement
from mdsigil.renderers.renderer import Renderer, make_backend
from mdsigil.renderers.shields import ShieldsBackend
from mdsigil.renderers.svg import SvgBackend

__all__ = [
    "Artifact",
    "Backend",
    "Fragment",
    "PlainTextBackend",
    "RenderedOutput",
    "Renderer",
    "Replacement",
    "ShieldsBackend",
    "SvgBackend",
    "make_backend",
]
