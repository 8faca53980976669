"""Core services: logging, exceptions and configuration."""
