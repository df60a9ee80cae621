# tara/services/speech.py
from __future__ import annotations
import asyncio, io, logging, secrets, time
from pathlib import Path
from typing import Optional
from google.cloud import texttospeech
from ..config import settings
from ..domain.catalog import LANGUAGES, DEFAULT_LANGUAGE
from ..errors import TranscriptionError, SpeechSynthesisError
from ..telemetry import trace
from .llm import client, get_speech_limiter

log = logging.getLogger(__name__)

_tts_client: Optional[texttospeech.TextToSpeechClient] = None

def tts_client() -> texttospeech.TextToSpeechClient:
    """
    Lazy-initialize the Google Text-to-Speech client (reads GOOGLE_APPLICATION_CREDENTIALS).
    """
    global _tts_client
    if _tts_client is None:
        _tts_client = texttospeech.TextToSpeechClient()
    return _tts_client

async def transcribe_audio(audio: bytes, filename: str, language: str) -> str:
    """
    Speech to text with Whisper. The language hint is only sent for English;
    Indian languages are left to auto-detection.
    """
    if not audio:
        raise TranscriptionError("audio payload is empty")
    buf = io.BytesIO(audio)
    buf.name = filename or "audio.webm"  # Whisper infers the container from the name
    log.info("speech.transcribe", extra={"bytes": len(audio), "audio_name": buf.name, "language": language})
    try:
        async with get_speech_limiter():
            out = await client().audio.transcriptions.create(
                file=buf,
                model=settings.model_transcribe,
                language="en" if language == "en" else None,
                response_format="text",
            )
    except Exception as e:
        log.exception("speech.transcribe failed")
        raise TranscriptionError("Failed to transcribe audio") from e
    text = out if isinstance(out, str) else getattr(out, "text", "")
    trace.log("speech.transcribed", chars=len(text or ""))
    return (text or "").strip()

def _voice_request(text: str, language: str) -> dict:
    cfg = LANGUAGES.get(language) or LANGUAGES[DEFAULT_LANGUAGE]
    return {
        "input": texttospeech.SynthesisInput(text=text),
        "voice": texttospeech.VoiceSelectionParams(
            language_code=cfg.locale,
            name=cfg.voice,
            ssml_gender=texttospeech.SsmlVoiceGender.FEMALE,
        ),
        "audio_config": texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.MP3,
            speaking_rate=settings.tts_speaking_rate,
            pitch=settings.tts_pitch,
        ),
    }

async def synthesize_speech(text: str, language: str, audio_dir: str | None = None) -> str:
    """
    Text to MP3 with the language's Indian voice. Writes the file under the
    audio directory and returns its public path ("/audio/<name>").
    """
    req = _voice_request(text, language)
    out_dir = Path(audio_dir or settings.audio_dir)
    name = f"answer_{int(time.time() * 1000)}_{secrets.token_hex(5)}.mp3"
    log.info("speech.synthesize", extra={"chars": len(text), "language": language, "voice": req["voice"].name})

    def _t() -> None:
        resp = tts_client().synthesize_speech(**req)
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / name).write_bytes(resp.audio_content)

    try:
        async with get_speech_limiter():
            await asyncio.to_thread(_t)
    except Exception as e:
        log.exception("speech.synthesize failed")
        raise SpeechSynthesisError("Failed to generate audio") from e
    trace.log("speech.synthesized", file=name)
    return f"/audio/{name}"
