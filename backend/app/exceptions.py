from typing import Optional


class MediaUploadError(Exception):
    """An attachment was refused or could not be stored.

    ``status_code`` is what the API answers with: 400 for files the client
    should fix, 502 when the media host itself failed.
    """

    def __init__(self, reason: str, status_code: int = 400, filename: Optional[str] = None):
        self.reason = reason
        self.status_code = status_code
        self.filename = filename
        super().__init__(reason)
