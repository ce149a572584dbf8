"""Background task definitions for slideshow generation.

This module runs the async generator on a private event loop in a worker
thread, so host code can keep polling progress while a run is in flight.
"""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from slideshow.models import GenerationResult
    from slideshow.orchestrator import SlideshowGenerator

logger = logging.getLogger(__name__)

# Thread pool for running async tasks in background
_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="slideshow")


def run_generation_sync(generator: "SlideshowGenerator", **kwargs: Any) -> "GenerationResult":
    """Run one generation to completion on a fresh event loop.

    Args:
        generator: The configured generator instance.
        **kwargs: Arguments forwarded to ``SlideshowGenerator.generate``.

    Returns:
        The run result.

    Raises:
        GenerationInProgressError: If the generator is already running.
        ValueError: If a generation parameter is out of range.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(generator.generate(**kwargs))
    except Exception as e:
        logger.exception("Slideshow generation could not start: %s", e)
        raise
    finally:
        asyncio.set_event_loop(None)
        loop.close()


def submit_generation(generator: "SlideshowGenerator", **kwargs: Any) -> "Future[GenerationResult]":
    """Submit a generation run to the thread pool.

    Args:
        generator: The configured generator instance.
        **kwargs: Arguments forwarded to ``SlideshowGenerator.generate``.

    Returns:
        A future resolving to the run result.
    """
    return _executor.submit(run_generation_sync, generator, **kwargs)
