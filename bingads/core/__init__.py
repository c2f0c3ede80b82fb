"""Core Application Layer: caller-facing service objects.

Connects the domain layer with the infrastructure layer through interfaces.
"""
