"""Integration DSL builder: rule-tree editing and vendor/config document generation."""

__version__ = "0.1.0"
