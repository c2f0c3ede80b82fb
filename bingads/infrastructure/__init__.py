"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the service objects to the outside world (configuration files,
environment variables, logging, the console) and hosts the resilience
services used for every remote call.
"""
