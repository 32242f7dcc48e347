"""Code emission backends.

Two implementations of one capability, sharing the ranked route table:

- :class:`StaticEmitter` — generated module, every exported method.
- :class:`DynamicEmitter` — startup-time imports, ``GET``/``POST`` only.

Delivery of the generated text is handled separately by the sinks in
:mod:`burrow.emitters.sinks`.
"""

from burrow.emitters.base import Emitter, StaticArtifact
from burrow.emitters.dynamic import DynamicEmitter, PlannedRoute, RegistrationPlan
from burrow.emitters.sinks import CallbackSink, FileSink, Sink, sink_for
from burrow.emitters.static import ParsedRegistration, StaticEmitter, parse_registrations

type EmissionArtifact = StaticArtifact | RegistrationPlan

__all__ = [
    "CallbackSink",
    "DynamicEmitter",
    "EmissionArtifact",
    "Emitter",
    "FileSink",
    "ParsedRegistration",
    "PlannedRoute",
    "RegistrationPlan",
    "Sink",
    "StaticArtifact",
    "StaticEmitter",
    "parse_registrations",
    "sink_for",
]
