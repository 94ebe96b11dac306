# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Shared fixtures for integration tests.

Provides a representative Vue project on disk.
"""

from pathlib import Path

import pytest


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a representative Vue project structure for integration testing.

    Layout:
    - App.vue imports Layout and provides user/locale (object form)
    - Layout.vue imports Sidebar and Card, provides theme (two-argument form)
    - Sidebar.vue imports Card, no provides
    - Card.vue imports nothing
    - Orphan.vue imports nothing and nobody imports it
    - Broken.vue imports Card with a malformed provide call
    - node_modules/ui/Card.vue must never be enumerated

    Returns:
        Path to the project root directory
    """
    project_root = tmp_path / "sample_app"
    components = project_root / "src" / "components"
    components.mkdir(parents=True)

    (project_root / "src" / "App.vue").write_text(
        """<template>
  <Layout />
</template>

<script setup>
import { provide, ref } from 'vue'
import Layout from './components/Layout.vue'

const user = ref(null)
provide({ user, locale: 'en' })
</script>
"""
    )

    (components / "Layout.vue").write_text(
        """<template>
  <Sidebar />
  <Card />
</template>

<script setup>
import { provide } from 'vue'
import { Sidebar, Card } from './index'

provide('theme', 'dark')
</script>
"""
    )

    (components / "Sidebar.vue").write_text(
        """<template><Card /></template>

<script setup>
import Card from './Card.vue'
</script>
"""
    )

    (components / "Card.vue").write_text(
        """<template><div class="card"><slot /></div></template>

<script setup>
import { inject } from 'vue'
const theme = inject('theme')
</script>
"""
    )

    (components / "Orphan.vue").write_text(
        """<template><span /></template>

<script>
export default { name: 'Orphan' }
</script>
"""
    )

    (components / "Broken.vue").write_text(
        """<template><Card /></template>

<script setup>
import Card from './Card.vue'
provide(onlyAKey)
</script>
"""
    )

    vendor = project_root / "node_modules" / "ui"
    vendor.mkdir(parents=True)
    (vendor / "Card.vue").write_text(
        "<script setup>\nimport Card from './Card.vue'\nprovide('vendor', true)\n</script>\n"
    )

    return project_root
