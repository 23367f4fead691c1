"""
=============================================================================
THREAD POOL
=============================================================================

Workers for the "threaded" concurrency mode. Each accepted connection is
submitted as ONE task; a worker runs ConnectionHandler.handle() on it to
completion, then goes back for the next task.

    Accept loop                Task queue                  Workers
    ───────────                ──────────                  ───────
    conn #1 ──submit()──►  ┌───────────────┐  ──get()──►  Worker-0  handle(#1)
    conn #2 ──submit()──►  │ #3 │ #4 │ ... │  ──get()──►  Worker-1  handle(#2)
    conn #3 ──submit()──►  └───────────────┘              Worker-2  (idle)

=============================================================================
WHY THE QUEUE IS UNBOUNDED
=============================================================================

submit() must never block: the accept loop has to keep accepting while
workers are busy with slow clients. When all workers are busy the pool
grows up to max_workers; beyond that, connections wait in the queue
(their sockets stay open, the client just waits longer).

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

One ``None`` is queued per worker. A worker that pulls ``None`` exits.
Because the queue is FIFO, every connection queued before shutdown is
handled first.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states."""
    IDLE = "idle"        # Waiting for task
    BUSY = "busy"        # Executing task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        submitted_at: Time the task was queued (for wait-time logging).
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

        ┌──────────────────────────────────────────────────────┐
        │  loop:                                               │
        │      task = queue.get()         (blocks)             │
        │      task is None?  -> exit                          │
        │      run task, log any exception (worker survives)   │
        │      queue.task_done()                               │
        └──────────────────────────────────────────────────────┘
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """Run one task, keeping the worker alive if it raises."""
        self.state = WorkerState.BUSY
        start_time = time.time()

        waited = start_time - task.submitted_at
        if waited > 1.0:
            logger.debug(f"Worker {self.worker_id} picked up task after {waited:.2f}s in queue")

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Auto-scaling thread pool with an unbounded task queue.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        pool.submit(handler.handle, args=(conn,))
        pool.shutdown()
    """

    def __init__(self, min_workers: int = 4, max_workers: int = 16):
        """
        Args:
            min_workers: Workers created by start().
            max_workers: Upper bound when scaling up under load.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    def start(self):
        """Start the minimum number of workers. No-op if already started."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()

        self._started = True
        self._shutdown = False

    def _add_worker(self) -> Worker:
        """Start one more worker. Caller must hold self._lock."""
        worker = Worker(task_queue=self._task_queue, worker_id=self._next_worker_id)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None):
        """
        Queue ``func(*args, **kwargs)`` for execution. Never blocks.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))
        self._maybe_scale_up()

    def _maybe_scale_up(self):
        """Add a worker if every worker is busy and tasks are waiting."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            if self.idle_workers == 0 and self._task_queue.qsize() > 0:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers.

        Args:
            wait: Join workers after sending poison pills. Queued tasks
                  ahead of the pills still run.
            timeout: Seconds to wait per worker when joining. None waits
                     for as long as the tasks take.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        with self._lock:
            workers = list(self._workers)

        for _ in workers:
            self._task_queue.put(None)

        if wait:
            for worker in workers:
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} did not stop in time")

        with self._lock:
            self._workers.clear()
        self._started = False

        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queue_size(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counts, e.g. for a debug log line."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
