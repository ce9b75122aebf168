"""Status models for eSCL scanners."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import JobState, ScannerState
from .parsing import (
    as_list,
    child,
    child_int,
    child_text,
    child_texts,
    decode_document,
    required_text,
)


@dataclass(frozen=True)
class JobInfo:
    """
    Summary of a job known to the scanner.

    Attributes:
        job_uri: The path of the job resource.
        job_uuid: The UUID of the job.
        age: Seconds since the job was last touched.
        images_completed: Number of pages scanned so far.
        images_to_transfer: Number of scanned pages not yet retrieved.
        job_state: The state of the job.
        job_state_reasons: Free-form reasons for the job state.

    """

    job_uri: str
    job_uuid: str | None = None
    age: int | None = None
    images_completed: int | None = None
    images_to_transfer: int | None = None
    job_state: JobState | None = None
    job_state_reasons: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobInfo:
        """Create a JobInfo from a ``scan:JobInfo`` element."""
        job_state = child_text(data, "JobState")
        return cls(
            job_uri=required_text(data, "JobUri"),
            job_uuid=child_text(data, "JobUuid"),
            age=child_int(data, "Age"),
            images_completed=child_int(data, "ImagesCompleted"),
            images_to_transfer=child_int(data, "ImagesToTransfer"),
            job_state=JobState(job_state) if job_state is not None else None,
            job_state_reasons=child_texts(
                child(data, "JobStateReasons"), "JobStateReason"
            ),
        )


@dataclass(frozen=True)
class ScannerStatus:
    """
    Represents the ``ScannerStatus`` document of an eSCL scanner.

    A snapshot taken when the document was fetched; fetch again for fresh data.
    """

    version: str
    state: ScannerState
    adf_state: str | None = None
    jobs: list[JobInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScannerStatus:
        """Create a ScannerStatus from the ``scan:ScannerStatus`` element."""
        return cls(
            version=required_text(data, "Version"),
            state=ScannerState(required_text(data, "State")),
            adf_state=child_text(data, "AdfState"),
            jobs=[
                JobInfo.from_dict(item)
                for item in as_list(child(child(data, "Jobs"), "JobInfo"))
                if isinstance(item, dict)
            ],
        )

    @classmethod
    def from_xml(cls, document: str | bytes) -> ScannerStatus:
        """
        Create a ScannerStatus from a ``ScannerStatus`` XML document.

        Raises:
            EsclDecodeError: The document is malformed, is not a status
                document, or reports an unknown scanner or job state.

        """
        return decode_document(document, "ScannerStatus", cls.from_dict)

    def job(self, job_uri: str) -> JobInfo | None:
        """
        Return the summary of a job by URI.

        Scanners report the job path while clients usually hold an absolute
        URL, so a trailing match is accepted.
        """
        job_uri = job_uri.rstrip("/")
        for info in self.jobs:
            reported = info.job_uri.rstrip("/")
            if reported and (job_uri == reported or job_uri.endswith(reported)):
                return info
        return None
