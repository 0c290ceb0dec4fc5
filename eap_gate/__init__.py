"""EAP quality gate evaluation."""

__version__ = "0.1.0"
