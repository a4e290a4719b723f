"""
Utility modules for static-upload.

Shared helpers used across the package:
- logging: Structured logging with entry/exit decorators
- config: Environment configuration
- config_loader: YAML config files
- errors: Exception hierarchy
- files: Glob expansion of input patterns
- metrics: Prometheus run metrics
"""

from static_upload.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
