"""Kubeconfig updater client core.

This package contains:
- config: Configuration management
- observability: Structured logging
- models: Pydantic data models
- storage: Local key-value storage
- clients: Backend service client
- services: Sync clock, metadata sync controller, notifications
- repositories: Credential resolver repository
"""

__version__ = "0.1.0"
