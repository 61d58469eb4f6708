# smartcv/app/core/orchestrator.py

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from smartcv.app.core.pdf_converter import PDFConverter
from smartcv.app.core.prompts import prepare_instructions
from smartcv.app.core.records import RecordRepository
from smartcv.app.core.result import Ok, Unavailable
from smartcv.app.core.store import PlatformStore
from smartcv.app.models.platform_models import Document, ResponseShapeError, extract_text
from smartcv.app.models.record_models import AnalysisRecord, AnalysisStage

logger = logging.getLogger(__name__)


class FeedbackParseError(ValueError):
    """The model's reply is not a JSON feedback object."""


@dataclass(frozen=True)
class AnalysisFailure:
    stage: AnalysisStage
    status: str


AnalysisOutcome = Union[Ok[AnalysisRecord], AnalysisFailure]


def parse_feedback(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FeedbackParseError(f"Feedback is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise FeedbackParseError(f"Feedback must be a JSON object, got {type(data).__name__}")
    return data


class AnalysisOrchestrator:
    """Takes one resume from upload to a stored, AI-annotated record.

    Stages run strictly in order and stop at the first one that yields nothing;
    finished stages are not undone. The draft record is saved before inference so
    it survives a failed analysis. `status_text` always shows the latest stage.
    """

    def __init__(
        self,
        store: PlatformStore,
        converter: Optional[PDFConverter] = None,
        prompt_builder: Callable[..., str] = prepare_instructions,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.converter = converter or PDFConverter(scale=store.settings.PDF_RENDER_SCALE)
        self.prompt_builder = prompt_builder
        self.on_status = on_status
        self.records = RecordRepository(store.kv)
        self.status_text = ""

    async def analyze(
        self,
        company_name: str,
        job_title: str,
        job_description: str,
        document: Document,
    ) -> AnalysisOutcome:
        self._set_status("Uploading the file...")
        uploaded = await self.store.fs.upload([document])
        if isinstance(uploaded, Unavailable):
            return self._fail(AnalysisStage.UPLOAD_DOCUMENT, "Error: Failed to upload file")

        self._set_status("Converting to image...")
        image = self.converter.convert_to_image(document)
        if isinstance(image, Unavailable):
            return self._fail(AnalysisStage.CONVERT, "Error: Failed to convert PDF to image")

        self._set_status("Uploading the image...")
        uploaded_image = await self.store.fs.upload([image.value.as_document()])
        if isinstance(uploaded_image, Unavailable):
            return self._fail(AnalysisStage.UPLOAD_IMAGE, "Error: Failed to upload image")

        self._set_status("Preparing data...")
        record = AnalysisRecord(
            id=str(uuid.uuid4()),
            resume_path=uploaded.value.path,
            image_path=uploaded_image.value.path,
            company_name=company_name,
            job_title=job_title,
            job_description=job_description,
            feedback="",
        )
        if isinstance(await self.records.save(record), Unavailable):
            return self._fail(AnalysisStage.SAVE_DRAFT, "Error: Failed to save analysis data")

        self._set_status("Analyzing...")
        instructions = self.prompt_builder(job_title=job_title, job_description=job_description)
        response = await self.store.ai.feedback(uploaded.value.path, instructions)
        if isinstance(response, Unavailable):
            return self._fail(AnalysisStage.INFERENCE, "Error: Failed to analyze resume")

        try:
            feedback = parse_feedback(extract_text(response.value.content()))
        except (ResponseShapeError, FeedbackParseError) as e:
            logger.warning("Analysis %s returned unreadable feedback: %s", record.id, e)
            return self._fail(AnalysisStage.PARSE, "Error: Failed to read the analysis results")
        record.feedback = feedback

        self._set_status("Saving results...")
        if isinstance(await self.records.save(record), Unavailable):
            return self._fail(AnalysisStage.SAVE_FINAL, "Error: Failed to save analysis results")

        self._set_status("Analysis complete")
        logger.info("Finished analysis id=%s company=%s title=%s", record.id, company_name, job_title)
        return Ok(record)

    # ---------- Helpers ----------
    def _set_status(self, text: str) -> None:
        self.status_text = text
        logger.info("Analysis status: %s", text)
        if self.on_status:
            self.on_status(text)

    def _fail(self, stage: AnalysisStage, text: str) -> AnalysisFailure:
        self._set_status(text)
        logger.warning("Analysis stopped at stage=%s", stage.value)
        return AnalysisFailure(stage=stage, status=text)
