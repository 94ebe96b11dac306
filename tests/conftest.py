# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Shared fixtures: in-memory workspaces with read-count and gating instrumentation."""

import asyncio
from collections import Counter
from typing import Dict, Optional

import pytest


def component(script: str, template: str = "<div />", setup: bool = True) -> str:
    """Build single-file component text around a script body."""
    script_tag = "<script setup>" if setup else "<script>"
    return f"<template>{template}</template>\n{script_tag}\n{script}\n</script>\n"


class CountingReader:
    """Async reader over an in-memory file map that counts every read.

    Missing paths raise FileNotFoundError like a real read would.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files: Dict[str, str] = dict(files or {})
        self.reads: Counter = Counter()

    async def __call__(self, filepath: str) -> str:
        self.reads[filepath] += 1
        if filepath not in self.files:
            raise FileNotFoundError(filepath)
        return self.files[filepath]

    @property
    def total_reads(self) -> int:
        return sum(self.reads.values())


@pytest.fixture
def counting_reader() -> CountingReader:
    """Empty in-memory workspace; tests fill ``reader.files``."""
    return CountingReader()


@pytest.fixture
def make_component():
    """Factory building component source text around a script body."""
    return component


class GatedReader:
    """Async reader that captures the file text, then waits for ``gate``.

    ``started`` is set once any read has captured its text.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files: Dict[str, str] = dict(files or {})
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    async def __call__(self, filepath: str) -> str:
        text = self.files[filepath]
        self.started.set()
        await self.gate.wait()
        return text


@pytest.fixture
def gated_reader() -> GatedReader:
    """Empty in-memory workspace whose reads block until ``gate`` is set."""
    return GatedReader()
