"""Service lifecycle framework with signals, render steps, task queues, scheduling, caches, HTTP and analytics services."""

__version__ = "0.1.0"