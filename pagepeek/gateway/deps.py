from typing import Annotated

from fastapi import Depends, Request

from pagepeek.gateway.config import Settings, get_settings
from pagepeek.gateway.preview.pipeline import PreviewPipeline

SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_preview_pipeline(request: Request) -> PreviewPipeline:
    return request.app.state.preview_pipeline


PreviewPipelineDep = Annotated[PreviewPipeline, Depends(get_preview_pipeline)]
