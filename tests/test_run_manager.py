"""
Unit tests for the in-memory run registry.
"""

import asyncio

import pytest

from slidesmith.core.run_manager import RunManager


class TestRunManager:
    @pytest.mark.asyncio
    async def test_register_and_launch(self, make_pipeline, request_payload):
        runs = RunManager()
        pipeline = make_pipeline(run_id="run-42")

        run_id = runs.register(pipeline)
        task = runs.launch(run_id, pipeline.create_presentation(request_payload))

        assert runs.get("run-42") is pipeline
        assert runs.is_running("run-42") is True
        assert await task is True
        await asyncio.sleep(0)
        assert runs.is_running("run-42") is False

    @pytest.mark.asyncio
    async def test_launch_rejects_concurrent_work(self, make_pipeline):
        runs = RunManager()
        pipeline = make_pipeline()
        run_id = runs.register(pipeline)
        gate = asyncio.Event()

        task = runs.launch(run_id, gate.wait())
        with pytest.raises(RuntimeError):
            runs.launch(run_id, pipeline.retry_pdf_only())

        gate.set()
        await task

    @pytest.mark.asyncio
    async def test_evicts_oldest_finished_runs(self, make_pipeline):
        runs = RunManager(max_runs=2)
        for index in range(3):
            runs.register(make_pipeline(run_id=f"run-{index}"))

        assert list(runs.runs) == ["run-1", "run-2"]
        assert runs.get("run-0") is None

    @pytest.mark.asyncio
    async def test_shutdown_cancels_in_flight_runs(self, make_pipeline):
        runs = RunManager()
        run_id = runs.register(make_pipeline())
        task = runs.launch(run_id, asyncio.Event().wait())
        await asyncio.sleep(0)

        await runs.shutdown()

        assert task.cancelled()
        assert runs.is_running(run_id) is False
