"""Game engine core: events, input bindings, worker threads, packet networking, transforms and a windowless frame loop."""

__version__ = "0.1.0"