# Copyright 2026 The Kubernetes Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import atexit
import functools
import logging
import threading

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

# --- Global state for the singleton TracerProvider ---
_TRACER_PROVIDER = None
_TRACER_PROVIDER_LOCK = threading.Lock()


def initialize_tracer(service_name: str):
    """Initializes and registers a global tracer provider using double-checked locking."""
    global _TRACER_PROVIDER
    if _TRACER_PROVIDER is not None:
        return

    with _TRACER_PROVIDER_LOCK:
        if _TRACER_PROVIDER is None:
            resource = Resource(attributes={"service.name": service_name})
            _TRACER_PROVIDER = TracerProvider(resource=resource)
            _TRACER_PROVIDER.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter())
            )
            trace.set_tracer_provider(_TRACER_PROVIDER)
            # Flush pending spans when the process exits.
            atexit.register(_TRACER_PROVIDER.shutdown)
            logger.info(
                f"Global OpenTelemetry TracerProvider configured for service '{service_name}'."
            )


def get_tracer(service_name: str) -> trace.Tracer:
    """Returns a tracer whose instrumentation scope is derived from service_name."""
    return trace.get_tracer(service_name.replace("-", "_"))


def trace_span(span_name):
    """A decorator to automatically wrap a method with an OpenTelemetry span."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            tracer = getattr(self, "tracer", None)
            if not tracer:
                return func(self, *args, **kwargs)

            with tracer.start_as_current_span(span_name):
                return func(self, *args, **kwargs)

        return wrapper

    return decorator
