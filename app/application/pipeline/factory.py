from __future__ import annotations

from typing import List
import asyncio

from app.application.pipeline.base import Middleware, Pipeline, PipelineContext, Step


class _RunAdapter:
    """Wraps an object exposing ``async run(context)`` so it can be called as a step."""

    def __init__(self, impl) -> None:
        self.impl = impl
        self.name = getattr(impl, "name", impl.__class__.__name__)

    async def __call__(self, context: PipelineContext) -> None:
        await self.impl.run(context)


class PipelineFactory:
    """Fluent builder for Pipelines, with optional middlewares per step.

    Example:
        factory = PipelineFactory()
        pipeline = factory.add(align).add(format_alignment).build()
    """

    def __init__(self, *, middlewares: List[Middleware] | None = None, fail_fast: bool = True):
        self._steps: List[Step] = []
        self._middlewares = list(middlewares or [])
        self._fail_fast = fail_fast

    def add(self, step) -> "PipelineFactory":
        wrapped = step
        if not callable(wrapped):
            run_attr = getattr(wrapped, "run", None)
            if run_attr is None or not asyncio.iscoroutinefunction(run_attr):
                raise TypeError(
                    f"{wrapped.__class__.__name__} is neither callable nor has an async run()"
                )
            wrapped = _RunAdapter(wrapped)
        for mw in self._middlewares:
            wrapped = mw(wrapped)
        self._steps.append(wrapped)
        return self

    def extend(self, steps: List[Step]) -> "PipelineFactory":
        for s in steps:
            self.add(s)
        return self

    def build(self) -> Pipeline:
        return Pipeline(self._steps, fail_fast=self._fail_fast)
