"""API Resilience Implementations.

Contains the call executor (retry loop with exponential and rate-limit
backoff) and the classifier for structured SOAP faults.
Bounded Context: API Resilience
"""
