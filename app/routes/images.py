from fastapi import APIRouter

from app.schemas.images import SignatureOut, SignRequest
from app.services.images import sign_params

router = APIRouter(prefix="/images", tags=["images"])


@router.post("/sign", response_model=SignatureOut)
def sign_upload(payload: SignRequest):
    """Sign client-side upload parameters so browsers can upload directly."""
    return {"signature": sign_params(payload.params_to_sign)}
