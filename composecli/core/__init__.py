"""Core Application Layer: binds CLI invocations to project operations.

Contains the action adapter, the command handlers and the attached-up
lifecycle coordinator.
"""
