"""Google Cloud Speech-to-Text long-running recognition adapter."""

from __future__ import annotations

from google.api_core import operation as gapic_operation
from google.cloud import speech

from visitscribe.adapters.transcription.base import RecognitionOptions, Transcriber, TranscriptionJobState


class GoogleSpeechTranscriber(Transcriber):
    def __init__(self, client: speech.SpeechClient | None = None) -> None:
        self._client = client or speech.SpeechClient()

    def submit(self, audio_uri: str, options: RecognitionOptions) -> str:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=options.sample_rate_hertz,
            language_code=options.language_code,
            enable_automatic_punctuation=options.enable_automatic_punctuation,
            model=options.model,
        )
        audio = speech.RecognitionAudio(uri=audio_uri)
        operation = self._client.long_running_recognize(config=config, audio=audio)
        return operation.operation.name

    def get_job(self, job_id: str) -> TranscriptionJobState:
        operations_client = self._client.transport.operations_client
        raw = operations_client.get_operation(job_id)
        if not raw.done:
            return TranscriptionJobState(job_id=job_id, done=False)
        if raw.HasField("error") and raw.error.code:
            return TranscriptionJobState(job_id=job_id, done=True, error=raw.error.message or str(raw.error.code))

        wrapped = gapic_operation.from_gapic(
            raw,
            operations_client,
            speech.LongRunningRecognizeResponse,
            metadata_type=speech.LongRunningRecognizeMetadata,
        )
        return TranscriptionJobState(job_id=job_id, done=True, pending=wrapped.result)


__all__ = ["GoogleSpeechTranscriber"]
