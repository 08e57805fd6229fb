"""
Worker configuration using Pydantic Settings.
Every section reads its own environment prefix; a local .env file is honoured.
"""

from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from processor.src.core.exceptions import ConfigurationError

# Load .env before any BaseSettings subclass reads env vars
load_dotenv()


class QueueSettings(BaseSettings):
    backend: str = "sqs"  # "sqs" or "memory"
    input: str = ""
    output: str = ""
    max_messages: int = 1
    wait_time_seconds: int = 10
    visibility_timeout: int = 300
    poll_backoff_seconds: float = 5.0
    idle_backoff_seconds: float = 0.0

    model_config = {"env_prefix": "QUEUE_"}


class StorageSettings(BaseSettings):
    backend: str = "s3"  # "s3", "gcs" or "local"
    output: str = ""
    local_root: str = "./media/buckets"
    gcs_credentials_path: str = ""

    model_config = {"env_prefix": "STORAGE_"}


class AWSSettings(BaseSettings):
    region: str = "us-east-1"
    endpoint_url: str = ""

    model_config = {"env_prefix": "AWS_"}


class FFmpegSettings(BaseSettings):
    binary: str = ""
    fps: float = 1.0
    frame_format: str = "png"
    timeout_seconds: int = 600

    model_config = {"env_prefix": "FFMPEG_"}


class WorkerSettings(BaseSettings):
    temp_dir: str = "/tmp/video-processor"
    concurrency: int = 1

    model_config = {"env_prefix": "WORKER_"}


class HealthSettings(BaseSettings):
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080

    model_config = {"env_prefix": "HEALTH_"}


class LoggingSettings(BaseSettings):
    level: str = "INFO"
    format: str = "text"  # "text" or "json"

    model_config = {"env_prefix": "LOG_"}


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    app_env: str = "development"

    queue: QueueSettings = Field(default_factory=QueueSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)
    ffmpeg: FFmpegSettings = Field(default_factory=FFmpegSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def notification_destination(self) -> str:
        return self.queue.output or "frames-output"

    def validate_required(self) -> None:
        """Fail fast when the worker cannot know where to read or write."""
        missing: list[str] = []
        if self.queue.backend == "sqs":
            if not self.queue.input:
                missing.append("QUEUE_INPUT")
            if not self.queue.output:
                missing.append("QUEUE_OUTPUT")
        if not self.storage.output:
            missing.append("STORAGE_OUTPUT")
        if missing:
            raise ConfigurationError(
                f"required environment variables are not set: {', '.join(missing)}"
            )
