class TutorError(Exception):
    """Base error for failures of an external collaborator (LLM, speech)."""

class TranscriptionError(TutorError):
    pass

class AnswerGenerationError(TutorError):
    pass

class SpeechSynthesisError(TutorError):
    pass
