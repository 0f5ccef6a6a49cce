"""Job registry and dispatcher: submit a crawl, poll for its summary."""
from site_digest.jobs.dispatcher import NO_PAGES_ERROR, JobDispatcher
from site_digest.jobs.registry import JobRegistry, JobState, JobStateError, JobStatus

__all__ = ["NO_PAGES_ERROR", "JobDispatcher", "JobRegistry", "JobState", "JobStateError", "JobStatus"]
