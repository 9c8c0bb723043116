from pydantic import BaseModel, Field


class PageTranscript(BaseModel):
    """
    Verbatim text of one captured page.

    Only written for pages whose transcription was accepted.
    Stored at: transcripts/{snapshot stem}.json and in content.json
    """
    index: int = Field(..., ge=0, description="Capture index parsed from the screenshot name")
    page: int = Field(..., ge=1, description="The book's own page number")
    text: str = Field(..., min_length=1, description="Cleaned transcription")
    source_image: str = Field(..., description="Screenshot the text was read from")

    model_config = {"frozen": True}
