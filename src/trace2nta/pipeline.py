"""
Transformation run: Trace file → NTA → UPPAAL XML file.

transform_file() runs the whole sequence synchronously and reports a
RunResult. start_transformation() runs it on a worker thread so an
interactive caller stays responsive, and hands the result to a callback.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from trace2nta.backends.uppaal_xml import save_xml_file
from trace2nta.builder import BuildContext
from trace2nta.config import TransformConfig
from trace2nta.errors import ModelError, RunInProgressError, TraceError
from trace2nta.serialization import save_model_dump
from trace2nta.traverser import ModelTraverser, load_trace_file

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """
    Terminal signal of a transformation run.

    Properties:
        success: True when the XML file was written
        output_path: Path of the written XML file
        error: Failure description when success is False
    """

    success: bool
    output_path: Optional[str] = None
    error: Optional[str] = None


def default_output_path(trace_path: str, config: TransformConfig) -> str:
    """Output next to the trace (or in config.output_dir), with a .xml extension."""
    directory = config.output_dir or os.path.dirname(trace_path)
    base = os.path.splitext(os.path.basename(trace_path))[0]
    return os.path.join(directory, base + ".xml")


def transform_file(
    trace_path: str,
    output_path: Optional[str] = None,
    config: Optional[TransformConfig] = None,
    context: Optional[BuildContext] = None,
) -> RunResult:
    """
    Transform one trace file into a UPPAAL XML file.

    Args:
        trace_path: Statement trace (YAML/JSON)
        output_path: Target file; derived from trace_path when omitted
        config: Run options
        context: Build context to use; a fresh one when omitted

    Returns:
        RunResult describing the outcome

    Raises:
        RunInProgressError: If `context` is busy with another run
    """
    config = config or TransformConfig()
    context = context or BuildContext()
    output_path = output_path or default_output_path(trace_path, config)

    with context.running():
        logger.info("Transforming %s", trace_path)
        try:
            trace = load_trace_file(trace_path)
            nta = ModelTraverser(context, config).traverse(trace.statements, trace.name)
        except (TraceError, ModelError) as e:
            logger.error("Transformation of %s failed: %s", trace_path, e)
            return RunResult(success=False, error=str(e))

        directory = os.path.dirname(output_path)
        if directory:
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as e:
                logger.error("Cannot create output directory %s: %s", directory, e)
                return RunResult(success=False, error=str(e))

        written = save_xml_file(nta, output_path)
        if written is None:
            return RunResult(success=False, error=f"Could not write {output_path}")

        if config.write_model_dump:
            save_model_dump(nta, written)

    logger.info("Transformation was finished: %s", written)
    return RunResult(success=True, output_path=written)


def start_transformation(
    trace_path: str,
    output_path: Optional[str] = None,
    config: Optional[TransformConfig] = None,
    context: Optional[BuildContext] = None,
    on_done: Optional[Callable[[RunResult], None]] = None,
) -> threading.Thread:
    """
    Run transform_file on a background thread.

    Returns:
        The started thread; join() it to wait for completion
    """

    def _run() -> None:
        try:
            result = transform_file(trace_path, output_path, config=config, context=context)
        except RunInProgressError as e:
            logger.error("%s", e)
            result = RunResult(success=False, error=str(e))
        except Exception as e:
            # the worker must always report back
            logger.exception("Transformation of %s failed unexpectedly", trace_path)
            result = RunResult(success=False, error=f"{type(e).__name__}: {e}")
        if on_done is not None:
            on_done(result)

    thread = threading.Thread(target=_run, name="trace2nta-transform", daemon=True)
    thread.start()
    return thread
