"""Upload orchestration: validate, preview, sanitize, upload, resolve."""

import asyncio
from typing import Any, List, Optional, Sequence

from .config import PipelineConfig, resolve_endpoints
from .error_handling import BatchOperationContextManager
from .exceptions import (
    GENERIC_FAILURE_MESSAGE,
    BlossomPipelineError,
    ResolutionEmptyError,
    UploadError,
    ValidationError,
)
from .image_utils import PillowImageCodec
from .logging_config import bind_run, get_logger
from .models import (
    FailureNotice,
    ImageInput,
    PipelineResult,
    SanitizedImage,
    UploadOutcome,
)
from .observability import LogContext, MetricsCollector, StructuredLogger, record_operation
from .preview import generate_previews
from .progress import (
    VALID_TRANSITIONS,
    PipelineStage,
    PipelineState,
    sanitize_progress,
    upload_progress,
)
from .protocols import (
    BlossomUploaderProtocol,
    FailureNotifierProtocol,
    ImageCodecProtocol,
    LoggerProtocol,
)
from .resolver import resolve_url
from .sanitizer import sanitize_image
from .validation import validate_batch
from ..processors.asyncio_processor import ItemResult, process_batch_async


class UploadOrchestrator:
    """Drives one batch of images through the two-stage upload pipeline.

    Progress runs 0-30 while images are sanitized and 30-100 while they are
    uploaded, advancing in completion order. Each call owns its own
    :class:`PipelineState`, so independent calls may run concurrently.
    """

    def __init__(
        self,
        uploader: BlossomUploaderProtocol,
        codec: Optional[ImageCodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[PipelineConfig] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        notifier: Optional[FailureNotifierProtocol] = None,
    ):
        self._uploader = uploader
        self._codec = codec or PillowImageCodec()
        self._logger = logger or StructuredLogger(get_logger("orchestrator"))
        self._config = config or PipelineConfig()
        self._policy = self._config.policy()
        self._metrics_collector = metrics_collector
        self._notifier = notifier

    async def upload(
        self,
        files: Sequence[ImageInput],
        is_authenticated: bool,
        signer: Any,
        endpoints: Optional[Sequence[str]] = None,
        state: Optional[PipelineState] = None,
    ) -> List[str]:
        """Upload a batch and return the resolved URLs (possibly empty)."""
        result = await self.run(files, is_authenticated, signer, endpoints, state)
        return result.urls

    async def run(
        self,
        files: Sequence[ImageInput],
        is_authenticated: bool,
        signer: Any,
        endpoints: Optional[Sequence[str]] = None,
        state: Optional[PipelineState] = None,
    ) -> PipelineResult:
        """Run the pipeline and return URLs, per-file outcomes and any failure."""
        state = state if state is not None else PipelineState()
        if state.failure is not None:
            state.dismiss_failure()
        # A previous run's final percentage is cleared before this run starts
        state.reset_progress()

        log_context = LogContext(
            operation="upload", component="upload_orchestrator"
        ).with_metadata(files=len(files), authenticated=is_authenticated)
        result = PipelineResult()

        with bind_run(log_context.correlation_id):
            await self._run_guarded(
                files, is_authenticated, signer, endpoints, state, result, log_context
            )
        return result

    async def _run_guarded(
        self,
        files: Sequence[ImageInput],
        is_authenticated: bool,
        signer: Any,
        endpoints: Optional[Sequence[str]],
        state: PipelineState,
        result: PipelineResult,
        log_context: LogContext,
    ) -> None:
        """Run every stage, settling the state back to IDLE however it ends."""
        try:
            state.transition(PipelineStage.VALIDATING)
            with record_operation(self._metrics_collector, "upload_pipeline", files=len(files)):
                await self._run_stages(
                    files, is_authenticated, signer, endpoints, state, result, log_context
                )
        except asyncio.CancelledError:
            self._logger.warning(
                f"Upload pipeline cancelled during {state.stage.value}", log_context
            )
            state.reset_progress()
            self._settle(state)
            raise
        except ValidationError as e:
            self._logger.warning(f"Validation failed: {e.message}", log_context)
            self._settle(state)
            result.failure = self._surface_failure(state, e.message, e.code, log_context)
        except Exception as e:
            self._logger.error(f"Upload pipeline failed: {e}", log_context)
            state.reset_progress()
            self._settle(state)
            code = e.code if isinstance(e, BlossomPipelineError) else "PIPELINE_ERROR"
            result.urls = []
            result.failure = self._surface_failure(
                state, str(e) or GENERIC_FAILURE_MESSAGE, code, log_context
            )

    async def _run_stages(
        self,
        files: Sequence[ImageInput],
        is_authenticated: bool,
        signer: Any,
        endpoints: Optional[Sequence[str]],
        state: PipelineState,
        result: PipelineResult,
        log_context: LogContext,
    ) -> None:
        validate_batch(files, self._policy)

        state.transition(PipelineStage.PREVIEWING)
        state.start_progress()
        state.set_previews(await generate_previews(files))

        state.transition(PipelineStage.SANITIZING)
        sanitized = await self._sanitize_all(files, state, log_context)

        upload_results: List[ItemResult[SanitizedImage, Any]] = []
        if not sanitized:
            self._logger.warning("No image survived sanitizing, skipping upload", log_context)
        elif is_authenticated:
            state.transition(PipelineStage.UPLOADING)
            targets = (
                self._config.resolve_endpoints()
                if endpoints is None
                else resolve_endpoints(endpoints, self._config.default_server)
            )
            upload_results = await self._upload_all(
                sanitized, signer, targets, state, log_context
            )
        else:
            self._logger.info("Not authenticated, skipping upload", log_context)

        state.transition(PipelineStage.FINALIZING)
        result.outcomes = [self._to_outcome(r) for r in upload_results]
        result.urls = [o.url for o in result.outcomes if o.url is not None]
        self._schedule_progress_reset(state)

        if result.urls:
            self._logger.info(
                f"Resolved {len(result.urls)}/{len(files)} URLs", log_context
            )
        else:
            error = ResolutionEmptyError()
            result.failure = self._surface_failure(
                state, error.message, error.code, log_context
            )
        state.transition(PipelineStage.IDLE)

    async def _sanitize_all(
        self,
        files: Sequence[ImageInput],
        state: PipelineState,
        log_context: LogContext,
    ) -> List[SanitizedImage]:
        total = len(files)
        stage_context = log_context.with_operation("sanitize")

        with BatchOperationContextManager(f"Sanitizing {total} images") as batch:

            def on_settled(item_result: ItemResult[ImageInput, SanitizedImage], settled: int) -> None:
                if not item_result.success:
                    batch.add_error(str(item_result.error), item_result.item.name)
                state.advance(sanitize_progress(settled, total))

            results = await process_batch_async(files, self._sanitize_one, on_settled)

        sanitized = [r.value for r in results if r.success and r.value is not None]
        self._logger.debug(
            f"Sanitized {len(sanitized)}/{total} images", stage_context
        )
        return sanitized

    async def _sanitize_one(self, image: ImageInput) -> SanitizedImage:
        with record_operation(self._metrics_collector, "sanitize_image", name=image.name):
            return await sanitize_image(image, self._codec)

    async def _upload_all(
        self,
        images: List[SanitizedImage],
        signer: Any,
        endpoints: List[str],
        state: PipelineState,
        log_context: LogContext,
    ) -> List[ItemResult[SanitizedImage, Any]]:
        total = len(images)
        stage_context = log_context.with_operation("upload").with_metadata(
            endpoints=",".join(endpoints)
        )
        self._logger.info(f"Uploading {total} images", stage_context)

        async def upload_one(image: SanitizedImage) -> Any:
            with record_operation(self._metrics_collector, "upload_image", name=image.name):
                try:
                    return await self._uploader.upload(image, signer, endpoints)
                except BlossomPipelineError:
                    raise
                except Exception as e:
                    raise UploadError(f"Upload of {image.name} failed: {e}") from e

        with BatchOperationContextManager(f"Uploading {total} images") as batch:

            def on_settled(item_result: ItemResult[SanitizedImage, Any], settled: int) -> None:
                if not item_result.success:
                    batch.add_error(str(item_result.error), item_result.item.name)
                state.advance(upload_progress(settled, total))

            return await process_batch_async(images, upload_one, on_settled)

    @staticmethod
    def _to_outcome(item_result: ItemResult[SanitizedImage, Any]) -> UploadOutcome:
        name = item_result.item.name
        if not item_result.success:
            return UploadOutcome(name=name, error=str(item_result.error))
        url = resolve_url(item_result.value)
        return UploadOutcome(
            name=name,
            url=url,
            raw_response=item_result.value,
            error="" if url is not None else "Response has no url tag",
        )

    def _schedule_progress_reset(self, state: PipelineState) -> None:
        # Leave the final percentage visible briefly before clearing it
        state.schedule_reset(self._config.finalize_delay)

    @staticmethod
    def _settle(state: PipelineState) -> None:
        """Walk the state back to IDLE after an uncaught failure."""
        if PipelineStage.FINALIZING in VALID_TRANSITIONS[state.stage]:
            state.transition(PipelineStage.FINALIZING)
        if state.stage is not PipelineStage.IDLE:
            state.transition(PipelineStage.IDLE)

    def _surface_failure(
        self,
        state: PipelineState,
        message: str,
        code: str,
        log_context: LogContext,
    ) -> FailureNotice:
        notice = FailureNotice(message=message, code=code)
        if not state.set_failure(notice):
            self._logger.warning(f"Failure notice already shown, dropping: {message}", log_context)
            return state.failure or notice
        self._logger.error(f"Upload failed: {message}", log_context)
        if self._notifier is not None:
            self._notifier.notify(notice)
        return notice
