# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Integration tests for provide-seeker.

This package contains integration tests that run the session, the file
watcher and the MCP layer against real component files on disk.
"""
