"""Tracing of kitty remote control calls.

kitty_harness.otel
~~~~~~~~~~~~~~~~~~

Every :class:`~kitty_harness.common.kitty_cmd` runs inside a span named
after the kitty subcommand, e.g. ``kitty @ send-text``, tagged with the
socket and the window it targets. Slow round-trips to a test's kitty then
show up next to the test's own spans, and the span context reaches child
processes through ``TRACEPARENT``.

Tracing is off unless ``KITTY_HARNESS_OTEL`` is truthy, or unset while an
OTLP endpoint is configured. The ``otel`` extra installs the exporter.
"""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import os
import typing as t

from .__about__ import __version__

if t.TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

#: Variable switching tracing on (``1``/``true``) or off (``0``/``false``)
OTEL_FLAG_VAR = "KITTY_HARNESS_OTEL"

#: Endpoint variables that turn tracing on when the flag is unset
OTLP_ENDPOINT_VARS = (
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
)

#: ``service.name`` of spans exported by this package
SERVICE_NAME = "kitty-test-harness"

_TRACER: t.Any = None
_OTEL_MISSING = False


def otel_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when kitty calls should be traced.

    Examples
    --------
    >>> otel_enabled({"KITTY_HARNESS_OTEL": "1"})
    True
    >>> otel_enabled({"KITTY_HARNESS_OTEL": "0", "OTEL_EXPORTER_OTLP_ENDPOINT": "x"})
    False
    >>> otel_enabled({})
    False
    """
    environ = os.environ if environ is None else environ
    flag = environ.get(OTEL_FLAG_VAR, "").strip().lower()
    if flag in {"1", "true"}:
        return True
    if flag in {"0", "false"}:
        return False
    return any(environ.get(name) for name in OTLP_ENDPOINT_VARS)


def span_attributes(args: Sequence[str]) -> dict[str, t.Any]:
    """Describe a kitty command line as span attributes.

    ``args`` are the arguments after the kitty binary.

    Examples
    --------
    >>> span_attributes(["@", "--to", "unix:/tmp/k.sock", "close-window",
    ...                  "--match", "id:3"])
    {'kitty.subcommand': 'close-window', 'kitty.socket': 'unix:/tmp/k.sock', \
'kitty.window_id': 3}
    >>> span_attributes(["--version"])
    {'kitty.subcommand': '--version'}
    """
    if not args:
        return {}
    if args[0] != "@":
        return {"kitty.subcommand": args[0]}

    attributes: dict[str, t.Any] = {}
    rest = list(args[1:])
    while rest and rest[0].startswith("--"):
        option = rest.pop(0)
        if option == "--to" and rest:
            attributes["kitty.socket"] = rest.pop(0)
    if rest:
        attributes = {"kitty.subcommand": rest[0], **attributes}

    for option, value in zip(rest, rest[1:]):
        if option == "--match" and value.startswith("id:") and value[3:].isdigit():
            attributes["kitty.window_id"] = int(value[3:])
    return attributes


def _get_tracer() -> t.Any:
    """Return this package's tracer, setting up OTLP export on first use."""
    global _TRACER, _OTEL_MISSING
    if _OTEL_MISSING or not otel_enabled():
        return None
    if _TRACER is not None:
        return _TRACER

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError:
        logger.warning(
            "%s is set but the otel extra is not installed, not tracing",
            OTEL_FLAG_VAR,
        )
        _OTEL_MISSING = True
        return None

    # an application that configured its own provider keeps it
    if isinstance(trace.get_tracer_provider(), trace.ProxyTracerProvider):
        provider = TracerProvider(
            resource=Resource.create(
                {"service.name": SERVICE_NAME, "service.version": __version__},
            ),
        )
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(provider)
    _TRACER = trace.get_tracer("kitty_harness", __version__)
    return _TRACER


@dataclasses.dataclass
class KittySpan:
    """Handle on the span around one kitty command.

    Attributes
    ----------
    env : dict
        ``TRACEPARENT``/``TRACESTATE`` to add to the child's environment.
        Empty when tracing is off.
    """

    env: dict[str, str] = dataclasses.field(default_factory=dict)
    span: t.Any = None

    def record_exit(self, returncode: int) -> None:
        """Attach kitty's exit status, marking the span failed if non-zero."""
        if self.span is None:
            return
        from opentelemetry import trace

        self.span.set_attribute("process.exit.code", returncode)
        if returncode != 0:
            self.span.set_status(trace.Status(trace.StatusCode.ERROR))


@contextlib.contextmanager
def kitty_span(args: Sequence[str]) -> t.Iterator[KittySpan]:
    """Trace one kitty command, ``args`` being everything after the binary.

    Examples
    --------
    >>> with kitty_span(["@", "ls"]) as span:
    ...     span.env
    {}
    """
    tracer = _get_tracer()
    if tracer is None:
        yield KittySpan()
        return

    from opentelemetry import propagate

    attributes = span_attributes(args)
    subcommand = attributes.get("kitty.subcommand", "")
    prefix = "kitty @" if args and args[0] == "@" else "kitty"
    name = f"{prefix} {subcommand}".strip()
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        carrier: dict[str, str] = {}
        propagate.inject(carrier)
        env = {
            header.upper(): value
            for header, value in carrier.items()
            if header in {"traceparent", "tracestate"}
        }
        yield KittySpan(env=env, span=span)


__all__ = [
    "KittySpan",
    "kitty_span",
    "otel_enabled",
    "span_attributes",
]
