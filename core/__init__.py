"""
Shared pieces of the license service.

This package holds the value objects, domain events and exceptions used
by the licenses and activities apps, along with the event bus, request
middleware, metrics, tracing setup and background tasks.
"""
