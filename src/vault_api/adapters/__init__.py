"""
Adapter layer for the storage API.

Contains the object-store abstraction with in-memory and S3 implementations,
selected by deployment mode.
"""
