import asyncio
import functools
import logging
import time
from abc import abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict

from skeleton_tracking.metrics.prometheus import (
    MetricsLabelContext,
    service_frame_processing_seconds,
    service_frames_errors_total,
    service_frames_processed_total,
)


class BaseWorker:
    """
    Reads one input at a time and processes it to completion on a single worker thread.

    _model_init, every _predict call and _model_close all run on the same executor
    thread, so thread-bound resources (inference sessions, GUI windows) stay on it.

    output_interface is optional: when given, each non-None result of _predict is
    passed through _format_results and written to it. The skeleton tracking service
    runs without one; results end at the debug display.
    """

    def __init__(
        self,
        worker_id: int,
        device: str,
        model_config: Dict,
        input_interface,
        output_interface=None,
    ):
        self.worker_id = worker_id
        self.input_interface = input_interface
        self.output_interface = output_interface
        self.model_config = model_config
        self.device = device
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"worker_{worker_id}")

        service_name = "unknown"
        task_id = None
        if isinstance(model_config, dict):
            service_name = model_config.get("service_name", service_name)
            task_id = model_config.get("task_id")

        topic = getattr(input_interface, "topic", None) or "unknown"

        self._metrics_context = MetricsLabelContext(
            service=service_name,
            worker_id=str(worker_id),
            topic=topic,
            initial_task_id=task_id,
        )

    @abstractmethod
    def _model_init(self):
        pass

    @abstractmethod
    def _predict(self, inputs: Any) -> Any:
        pass

    def _model_close(self):
        """Release resources acquired in _model_init."""
        pass

    def _format_results(self, results: Any) -> Any:
        """Format the results for output."""
        return results

    async def run(self):
        """Run the worker, reading from input and writing to output."""
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(self._executor, self._model_init)
        except Exception as e:
            logging.error(f"Worker {self.worker_id} on {self.device} failed to initialize: {e}")
            self._executor.shutdown(wait=False)
            raise

        try:
            while True:
                try:
                    inputs = await self.input_interface.read_data()
                except EOFError as e:
                    logging.info(f"Worker {self.worker_id} input finished: {e}")
                    break

                if inputs is None:
                    continue

                task_id = getattr(inputs, "task_id", None)
                if task_id is None and isinstance(inputs, dict):
                    task_id = inputs.get("task_id")
                labels = self._metrics_context.labels_for(task_id)

                start_time = time.perf_counter()
                try:
                    results = await loop.run_in_executor(
                        self._executor,
                        functools.partial(self._predict, inputs),
                    )
                except Exception:
                    duration = time.perf_counter() - start_time
                    service_frame_processing_seconds.labels(**labels).observe(duration)
                    service_frames_errors_total.labels(**labels).inc()
                    raise

                duration = time.perf_counter() - start_time
                service_frame_processing_seconds.labels(**labels).observe(duration)

                if results is not None:
                    service_frames_processed_total.labels(**labels).inc()
                    output = self._format_results(results)
                    if self.output_interface is not None and output is not None:
                        await self.output_interface.write_data(output)
        except asyncio.CancelledError:
            logging.info(f"Worker {self.worker_id} on {self.device} cancelled, stopping")
            raise
        except Exception as e:
            logging.error(f"Worker {self.worker_id} on {self.device} error: {e}")
            raise
        finally:
            await loop.run_in_executor(self._executor, self._model_close)
            self._executor.shutdown(wait=False)

    def get_metrics_labels(self, task_id: Any = None) -> Dict[str, str]:
        """Expose metric labels for the current worker."""

        return self._metrics_context.labels_for(task_id)

