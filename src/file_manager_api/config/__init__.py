"""
Configuration management for the File Manager API.

Contains the Pydantic settings object shared by the API, the CLI and the
Lambda entry point.
"""
