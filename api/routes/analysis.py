from typing import Annotated

from fastapi import APIRouter, Depends, Request

from api.deps import AnalysisServiceDep, ClientKeyDep
from schemas.analysis import AnalysisResult

router = APIRouter()


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


@router.post("/analyze", response_model=AnalysisResult)
def analyze(
    service: AnalysisServiceDep,
    client_key: ClientKeyDep,
    body: Annotated[bytes, Depends(read_raw_body)],
):
    # Unparsed body: the rate limit is checked before the payload is decoded or validated.
    return service.analyze(body, client_key=client_key)
