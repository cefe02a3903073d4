"""Shared test fixtures for motion-codegen."""

from __future__ import annotations

import pytest

from motioncg.core.config import CoreConfig
from motioncg.patterns.library import PatternLibrary
from motioncg.pipeline.orchestrator import Orchestrator

REACT_FADE = """import { motion } from 'framer-motion';

export default function FadeBox() {
  return (
    <motion.div initial={{ opacity: 0 }} animate={{ opacity: 1 }} transition={{ duration: 0.3 }}>
      Hello
    </motion.div>
  );
}
"""

REACT_WIDTH = """import { motion } from 'framer-motion';

export default function Bar() {
  return <motion.div initial={{ width: 0 }} animate={{ width: 200 }} />;
}
"""

VUE_FADE = """<template>
  <div
    v-motion
    :initial="{ opacity: 0 }"
    :enter="{ opacity: 1, transition: { duration: 300 } }"
  >
    Hello
  </div>
</template>

<script setup lang="ts">
defineOptions({ name: 'FadeBox' });
</script>
"""

JS_FADE = """import { animate } from 'motion';

export function animateFadeBox(element: HTMLElement): void {
  animate(element, { opacity: 0 }).complete();
  animate(element, { opacity: 1 }, { duration: 0.3 });
}
"""


@pytest.fixture(scope="session")
def library() -> PatternLibrary:
    """The bundled pattern seed, loaded once."""
    return PatternLibrary.from_yaml()


@pytest.fixture
def orchestrator(library) -> Orchestrator:
    return Orchestrator(library, CoreConfig())


@pytest.fixture
def react_fade() -> str:
    return REACT_FADE


@pytest.fixture
def react_width() -> str:
    return REACT_WIDTH


@pytest.fixture
def vue_fade() -> str:
    return VUE_FADE


@pytest.fixture
def js_fade() -> str:
    return JS_FADE
