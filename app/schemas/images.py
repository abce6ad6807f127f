from pydantic import BaseModel


class SignRequest(BaseModel):
    params_to_sign: dict[str, str | int | float | bool | None]


class SignatureOut(BaseModel):
    signature: str
