"""Domain models: pipeline configuration, run results and error records."""

from .config_models import EndpointConfig, JobConfig, PipelineConfig
from .error_record import ErrorRecord, error_type_of
from .job_run import JobRun, JobStatus
from .processing_result import BatchStatsAccumulator, ConversionResult, JobStat, ProcessingResult
from .resolved_row import ResolvedRow

__all__ = [
    # Configuration models
    "EndpointConfig",
    "JobConfig",
    "PipelineConfig",
    # Processing models
    "ResolvedRow",
    "ConversionResult",
    "JobRun",
    "JobStatus",
    "JobStat",
    "ProcessingResult",
    "BatchStatsAccumulator",
    # Error log
    "ErrorRecord",
    "error_type_of",
]
