from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from chalkboard.services.teaching import StepGenerator

router = APIRouter(tags=["teach"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class TeachRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str
    voice_profile: str = Field("english", alias="voiceProfile")
    chat_id: str | None = Field(None, alias="chatId")


def get_step_generator() -> StepGenerator:
    return StepGenerator()


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.post("/teach")
async def teach(
    body: TeachRequest, generator: StepGenerator = Depends(get_step_generator)
) -> dict:
    """Answer a typed or spoken utterance with narrated board steps."""
    steps = await generator.teach(body.topic, body.voice_profile, body.chat_id)
    return {"steps": [step.to_payload() for step in steps]}


@router.post("/teach-image")
async def teach_image(
    image: UploadFile | None = File(None),
    question: str = Form(""),
    voice_profile: str = Form("english", alias="voiceProfile"),
    chat_id: str | None = Form(None, alias="chatId"),
    generator: StepGenerator = Depends(get_step_generator),
) -> dict:
    """Explain an uploaded image (plus an optional question) as board steps."""
    data = await image.read() if image is not None else b""
    steps = await generator.teach_image(
        question,
        voice_profile,
        chat_id,
        data,
        content_type=image.content_type if image is not None else None,
    )
    return {"steps": [step.to_payload() for step in steps]}
