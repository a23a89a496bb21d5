# attendance_ocr/ocr/errors.py
class OCRError(Exception):
    """Base OCR error (wrapped)."""

class RecognizerInitError(OCRError):
    """Recognizer could not start (missing binary, bad language pack). Fatal."""

class RecognitionFailure(OCRError):
    """Recognizer started but failed on this input. Cause is chained."""

class UnsupportedFileFormat(OCRError):
    """Bytes are not an image/PDF the recognizer can read."""
