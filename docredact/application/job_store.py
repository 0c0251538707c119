from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from docredact.application.pipeline.cancellation import CancellationToken
from docredact.application.pipeline.orchestrator import PipelineResult
from docredact.application.pipeline.progress import PipelineProgress
from docredact.domain.entities.data_element import ConfiguredDataElement
from docredact.domain.entities.documents import SourceDocument
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.extraction.base import ExtractionMode


def _utcnow() -> datetime:
  return datetime.now(timezone.utc)


@dataclass
class JobRecord:
  source: SourceDocument
  document_type_id: str
  sub_type_id: Optional[str] = None
  elements: Sequence[ConfiguredDataElement] = field(default_factory=tuple)
  mode: ExtractionMode = ExtractionMode.STANDARD
  job_id: str = field(default_factory=lambda: uuid4().hex)
  cancellation: CancellationToken = field(default_factory=CancellationToken)
  progress: Optional[PipelineProgress] = None
  result: Optional[PipelineResult] = None
  created_at: datetime = field(default_factory=_utcnow)
  finished_at: Optional[datetime] = None

  @property
  def state(self) -> PipelineState:
    if self.result is not None:
      return self.result.state
    if self.progress is not None:
      return self.progress.state
    return PipelineState.IDLE

  @property
  def is_terminal(self) -> bool:
    return self.state in (PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED)

  def finish(self, result: PipelineResult) -> None:
    self.result = result
    if result.progress is not None:
      self.progress = result.progress
    self.finished_at = _utcnow()


class JobStore:
  """In-memory registry of jobs for the lifetime of the process."""

  def __init__(self) -> None:
    self._jobs: Dict[str, JobRecord] = {}
    self._lock = Lock()

  def add(self, job: JobRecord) -> None:
    with self._lock:
      self._jobs[job.job_id] = job

  def get(self, job_id: str) -> Optional[JobRecord]:
    with self._lock:
      return self._jobs.get(job_id)

  def update(self, job_id: str, job: JobRecord) -> None:
    with self._lock:
      self._jobs[job_id] = job

  def list(self) -> List[JobRecord]:
    with self._lock:
      return list(self._jobs.values())

  def remove(self, job_id: str) -> None:
    with self._lock:
      self._jobs.pop(job_id, None)

  def clear(self) -> None:
    with self._lock:
      self._jobs.clear()
